from typing import Any, Literal

from pydantic import BaseModel, Field

from authcore.domain.entities import Identity


class Envelope(BaseModel):
    status: Literal["success", "error"] = "success"
    message: str
    code: int = 200
    data: Any = None


class IdentityOut(BaseModel):
    id: str = Field(..., description="The id of the identity")
    name: str
    email: str
    verified: bool
    role: str

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityOut":
        return cls(
            id=identity.id,
            name=identity.name,
            email=identity.email,
            verified=identity.verified,
            role=identity.role,
        )


class LoginOut(BaseModel):
    user: IdentityOut
    access_token: str


class AccessTokenOut(BaseModel):
    access_token: str


def success(message: str, data: Any = None, code: int = 200) -> Envelope:
    if isinstance(data, BaseModel):
        data = data.model_dump()
    return Envelope(status="success", message=message, code=code, data=data)
