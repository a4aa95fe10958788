from __future__ import annotations

from typing import Optional, Protocol

from authcore.domain.entities import Identity


class IdentityReaderPort(Protocol):
    """Read-only view of the durable store used on the authentication path."""

    async def find_identity_by_id(self, identity_id: str) -> Optional[Identity]:
        """Return None if not found."""

    async def find_identity_by_contact(self, email: str) -> Optional[Identity]:
        """Return None if not found."""


class IdentityRepositoryPort(Protocol):
    async def get_by_email(self, email: str) -> Optional[Identity]:
        """Fetch identity by (normalized) email. Return None if not found."""

    async def get_by_email_with_hash(
        self, email: str
    ) -> tuple[Identity, str] | None:
        """Fetch identity plus its password hash. Return None if not found."""

    async def create_unverified(
        self, *, name: str, email: str, password_hash: str
    ) -> Identity:
        """
        Insert a new unverified identity.
        Raise Conflict if the email is already taken.
        """

    async def delete(self, identity_id: str) -> None:
        """Remove the identity; absence is not an error."""

    async def set_verified(self, identity_id: str) -> None:
        """Flip the verification flag to true."""

    async def set_password_hash(self, identity_id: str, password_hash: str) -> None:
        """Replace the stored password hash."""
