from dataclasses import dataclass
from typing import Literal, get_args

from authcore.domain.errors import InvalidStatusTransition

Role = Literal["user", "admin"]
ROLES: tuple[str, ...] = get_args(Role)


@dataclass
class Identity:
    id: str | None = None
    email: str | None = None
    name: str = ""
    verified: bool = False
    role: Role = "user"

    def __post_init__(self):
        if self.email:
            self.email = self.email.strip().lower()
            if not self.email:
                raise ValueError("email cannot be empty")
        else:
            raise ValueError("email is required")
        if self.role not in ROLES:
            raise ValueError(f"unknown role: {self.role}")

    def mark_verified(self):
        if self.verified:
            raise InvalidStatusTransition("identity already verified")
        self.verified = True

    def has_role(self, *roles: str) -> bool:
        return self.role in roles


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    token_type: Literal["access", "refresh"]
    issued_at: int
    expires_at: int
    token_id: str | None = None
