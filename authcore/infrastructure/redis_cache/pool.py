from __future__ import annotations

from redis.asyncio import Redis


def create_redis(url: str, *, timeout_seconds: float = 2.0) -> Redis:
    """
    Build a Redis client for the given URL. The caller owns it (see app lifespan)
    and passes it to each adapter; nothing here is process-global.
    decode_responses=True -> we get/put str, not bytes.
    Every command is bounded by timeout_seconds.
    """
    return Redis.from_url(
        url,
        encoding="utf-8",
        decode_responses=True,
        socket_timeout=timeout_seconds,
        socket_connect_timeout=timeout_seconds,
    )


async def close_redis(client: Redis) -> None:
    await client.aclose()
