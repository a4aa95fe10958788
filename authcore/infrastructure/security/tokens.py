"""
Signed, self-contained bearer credentials (JWT, HS256 by default).

Access and refresh tokens use separate secrets and carry a ``typ`` claim, so a
token of one kind never decodes as the other. Refresh tokens also carry a
random ``jti`` so two tokens issued in the same second for the same identity
are still distinct values (and therefore have distinct fingerprints).
"""

from __future__ import annotations

import secrets
import time
from typing import Callable, Literal

import jwt

from authcore.domain.entities import TokenClaims
from authcore.domain.errors import CredentialExpired, CredentialInvalid
from authcore.domain.ports.token_signer import TokenSignerPort

TokenType = Literal["access", "refresh"]


class JwtSigner(TokenSignerPort):
    def __init__(
        self,
        *,
        secret: str,
        ttl_seconds: int,
        token_type: TokenType,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("signing secret is required")
        self._secret = secret
        self.ttl_seconds = ttl_seconds
        self.token_type = token_type
        self._algorithm = algorithm
        self._clock = clock

    def sign(self, subject: str) -> str:
        now = int(self._clock())
        payload = {
            "sub": subject,
            "typ": self.token_type,
            "iat": now,
            "exp": now + self.ttl_seconds,
        }
        if self.token_type == "refresh":
            payload["jti"] = secrets.token_urlsafe(16)
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Check signature and expiry.
        Raises CredentialExpired or CredentialInvalid; callers should not
        let the distinction reach the client.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"], "verify_iat": False},
            )
        except jwt.ExpiredSignatureError as e:
            raise CredentialExpired() from e
        except jwt.InvalidTokenError as e:
            raise CredentialInvalid() from e

        if payload.get("typ") != self.token_type or not payload.get("sub"):
            raise CredentialInvalid()
        return TokenClaims(
            subject=str(payload["sub"]),
            token_type=self.token_type,
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
            token_id=payload.get("jti"),
        )
