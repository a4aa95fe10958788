from __future__ import annotations

from types import TracebackType
from typing import Protocol, Type

from authcore.domain.ports.identity_repository import IdentityRepositoryPort


class UnitOfWorkPort(Protocol):
    """
    Transaction boundary around the durable identity store.

    Usage:
        async with uow as tx:
            identity = await tx.identities.create_unverified(
                name=name, email=email, password_hash=pwd_hash
            )
            await tx.commit()

    Leaving the block without commit() (or with an exception) rolls back.
    """

    identities: IdentityRepositoryPort

    async def __aenter__(self) -> "UnitOfWorkPort":
        """Begin a new transaction."""

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """End the transaction; roll back unless committed."""

    async def commit(self) -> None:
        """Commit the transaction."""

    async def rollback(self) -> None:
        """Rollback the transaction."""
