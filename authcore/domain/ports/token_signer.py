from __future__ import annotations

from typing import Protocol

from authcore.domain.entities import TokenClaims


class TokenSignerPort(Protocol):
    ttl_seconds: int

    def sign(self, subject: str) -> str:
        """Return a signed, self-contained token bound to subject."""

    def verify(self, token: str) -> TokenClaims:
        """
        Check signature + expiry.
        Raise CredentialExpired / CredentialInvalid on failure.
        """
