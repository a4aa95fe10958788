from __future__ import annotations

import logging
from typing import Sequence

from redis.asyncio import Redis
from redis.exceptions import RedisError

from authcore.domain.errors import StoreUnavailable
from authcore.domain.ports.key_value_store import KeyValueStorePort

logger = logging.getLogger(__name__)

_LUA_INCR_WITH_EXPIRY = """
-- KEYS[1]: counter key
-- ARGV[1]: window length (seconds)
local count = redis.call('INCR', KEYS[1])
if count == 1 or redis.call('TTL', KEYS[1]) < 0 then
  redis.call('EXPIRE', KEYS[1], tonumber(ARGV[1]))
end
return count
"""

_LUA_COMPARE_AND_DELETE = """
-- KEYS[1]: key
-- ARGV[1]: expected value
local cur = redis.call('GET', KEYS[1])
if not cur or cur ~= ARGV[1] then
  return 0
end
redis.call('DEL', KEYS[1])
return 1
"""

_LUA_COMPARE_AND_SET = """
-- KEYS[1]: key
-- ARGV[1]: expected value, ARGV[2]: new value, ARGV[3]: ttl (seconds)
local cur = redis.call('GET', KEYS[1])
if not cur or cur ~= ARGV[1] then
  return 0
end
redis.call('SET', KEYS[1], ARGV[2], 'EX', tonumber(ARGV[3]))
return 1
"""

SCAN_BATCH = 100


class RedisKeyValueStore(KeyValueStorePort):
    """
    Redis implementation of KeyValueStorePort.
    Every RedisError (connection refused, socket timeout, ...) is surfaced as
    StoreUnavailable; callers decide whether that is fatal for their path.
    """

    def __init__(self, redis: Redis) -> None:
        self._redis = redis
        self._incr = redis.register_script(_LUA_INCR_WITH_EXPIRY)
        self._cad = redis.register_script(_LUA_COMPARE_AND_DELETE)
        self._cas = redis.register_script(_LUA_COMPARE_AND_SET)

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            raise StoreUnavailable() from e

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._redis.set(key, value, ex=max(1, int(ttl_seconds)))
        except RedisError as e:
            raise StoreUnavailable() from e

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except RedisError as e:
            raise StoreUnavailable() from e

    async def scan_keys(self, pattern: str) -> Sequence[str]:
        try:
            return [
                key
                async for key in self._redis.scan_iter(match=pattern, count=SCAN_BATCH)
            ]
        except RedisError as e:
            raise StoreUnavailable() from e

    async def delete_many(self, keys: Sequence[str]) -> int:
        if not keys:
            return 0
        deleted = 0
        try:
            for start in range(0, len(keys), SCAN_BATCH):
                pipe = self._redis.pipeline(transaction=False)
                for key in keys[start : start + SCAN_BATCH]:
                    pipe.delete(key)
                deleted += sum(int(n) for n in await pipe.execute())
        except RedisError as e:
            raise StoreUnavailable() from e
        return deleted

    async def increment_with_expiry(self, key: str, window_seconds: int) -> int:
        try:
            res = await self._incr(keys=[key], args=[max(1, int(window_seconds))])
        except RedisError as e:
            raise StoreUnavailable() from e
        return int(res)

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        try:
            res = await self._cad(keys=[key], args=[expected])
        except RedisError as e:
            raise StoreUnavailable() from e
        return int(res) == 1

    async def compare_and_set(
        self, key: str, expected: str, value: str, ttl_seconds: int
    ) -> bool:
        try:
            res = await self._cas(
                keys=[key], args=[expected, value, max(1, int(ttl_seconds))]
            )
        except RedisError as e:
            raise StoreUnavailable() from e
        return int(res) == 1

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError:
            logger.warning("redis ping failed")
            return False
