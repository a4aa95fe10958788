"""
Cache-aside layer for expensive read queries.

The cache is never the source of truth: read faults count as misses, write
and delete faults are logged and dropped.

Pattern invalidation runs as a background sweep (see PatternInvalidator), so
it can finish after the mutating request has already answered. Until the
sweep completes, or the entry's TTL runs out, a reader may still get the old
listing. That window is the staleness bound callers accept.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

from authcore.domain.cache_keys import item_key, listing_pattern
from authcore.domain.errors import StoreUnavailable
from authcore.domain.ports.key_value_store import KeyValueStorePort

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 600


class PatternInvalidator:
    """Runs pattern sweeps as tasks, at most ``max_concurrency`` at a time."""

    def __init__(self, store: KeyValueStorePort, *, max_concurrency: int = 4) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._store = store
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def sweep(self, pattern: str) -> int:
        async with self._semaphore:
            try:
                keys = await self._store.scan_keys(pattern)
                deleted = await self._store.delete_many(list(keys))
            except StoreUnavailable:
                logger.warning("cache sweep failed", extra={"pattern": pattern})
                return 0
        logger.info(
            "cache sweep finished", extra={"pattern": pattern, "deleted": deleted}
        )
        return deleted

    def schedule(self, pattern: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.sweep(pattern))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight sweeps (used at shutdown and in tests)."""
        if not self._tasks:
            return
        done, pending = await asyncio.wait(list(self._tasks), timeout=timeout)
        if pending:
            logger.warning("cache sweeps still running", extra={"count": len(pending)})


class ResponseCache:
    def __init__(
        self,
        store: KeyValueStorePort,
        invalidator: PatternInvalidator,
        *,
        default_ttl: int = DEFAULT_CACHE_TTL_SECONDS,
    ) -> None:
        self._store = store
        self._invalidator = invalidator
        self.default_ttl = default_ttl

    async def read(self, fingerprint: str) -> Any | None:
        try:
            raw = await self._store.get(fingerprint)
        except StoreUnavailable:
            logger.warning("cache read failed", extra={"key": fingerprint})
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("cache entry not decodable", extra={"key": fingerprint})
            return None

    async def write(self, fingerprint: str, value: Any, ttl: int | None = None) -> bool:
        # None is indistinguishable from a miss, so it is never cached.
        if value is None:
            return False
        try:
            payload = json.dumps(value, separators=(",", ":"), default=str)
            await self._store.set(fingerprint, payload, ttl or self.default_ttl)
        except (StoreUnavailable, TypeError, ValueError):
            logger.warning("cache write failed", extra={"key": fingerprint})
            return False
        return True

    async def invalidate(self, fingerprint: str) -> bool:
        try:
            await self._store.delete(fingerprint)
        except StoreUnavailable:
            logger.warning("cache delete failed", extra={"key": fingerprint})
            return False
        return True

    def invalidate_by_pattern(self, prefix: str) -> asyncio.Task:
        pattern = prefix if prefix.endswith("*") else prefix + "*"
        return self._invalidator.schedule(pattern)

    async def get_or_load(
        self,
        fingerprint: str,
        loader: Callable[[], Awaitable[Any]],
        ttl: int | None = None,
    ) -> tuple[Any, bool]:
        """Read-through: returns (value, served_from_cache)."""
        cached = await self.read(fingerprint)
        if cached is not None:
            return cached, True
        value = await loader()
        await self.write(fingerprint, value, ttl)
        return value, False

    async def invalidate_resource(
        self, resource: str, owner: str | None = None, record_id: str | None = None
    ) -> list[asyncio.Task]:
        """
        After a create/update/delete: drop the record entry, then sweep the
        owner's listings and the unscoped listings of that resource kind.
        """
        if record_id is not None:
            await self.invalidate(item_key(resource, record_id))
        tasks = [self.invalidate_by_pattern(listing_pattern(resource))]
        if owner is not None:
            tasks.append(self.invalidate_by_pattern(listing_pattern(resource, owner)))
        return tasks
