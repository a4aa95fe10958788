from __future__ import annotations

from typing import Protocol, Sequence


class KeyValueStorePort(Protocol):
    """
    Fast ephemeral store. Every value written here is a lease with a TTL.
    Implementations raise StoreUnavailable on connectivity problems/timeouts.
    """

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent/expired."""

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store/replace value with TTL=ttl_seconds."""

    async def delete(self, key: str) -> None:
        """Delete key; absence is not an error."""

    async def scan_keys(self, pattern: str) -> Sequence[str]:
        """All keys matching a glob pattern (non-blocking cursor scan)."""

    async def delete_many(self, keys: Sequence[str]) -> int:
        """Delete keys in bulk, return how many existed."""

    async def increment_with_expiry(self, key: str, window_seconds: int) -> int:
        """
        Atomically increment a counter. The first increment starts the window
        (expiry=window_seconds); later ones leave the expiry untouched.
        """

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        """Delete key only if it currently holds `expected`. True if deleted."""

    async def compare_and_set(
        self, key: str, expected: str, value: str, ttl_seconds: int
    ) -> bool:
        """Replace key only if it currently holds `expected`. True if swapped."""
