from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from authcore.domain.errors import RateLimited
from authcore.domain.ports.key_value_store import KeyValueStorePort
from authcore.domain.services import fingerprint_secret

logger = logging.getLogger(__name__)

OTP = "otp"
LOGIN = "login"
API = "api"


@dataclass(frozen=True)
class RateLimitPolicy:
    purpose: str
    limit: int
    window_seconds: int
    message: str


@dataclass(frozen=True)
class RateLimitStatus:
    purpose: str
    count: int
    limit: int
    window_seconds: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)


def default_policies(*, production: bool) -> list[RateLimitPolicy]:
    return [
        RateLimitPolicy(
            purpose=LOGIN,
            limit=10 if production else 30,
            window_seconds=15 * 60,
            message="Too many login attempts, please try again after 15 minutes",
        ),
        RateLimitPolicy(
            purpose=OTP,
            limit=3 if production else 10,
            window_seconds=10 * 60,
            message="Too many OTP requests, please try again after 10 minutes",
        ),
        RateLimitPolicy(
            purpose=API,
            limit=100 if production else 500,
            window_seconds=15 * 60,
            message="Too many requests, please try again after 15 minutes",
        ),
    ]


class RateLimiter:
    """
    Fixed-window counters keyed by ``rl:<purpose>:<identifier>``.

    The counter is incremented atomically in the store and the window starts
    with the first hit, so it resets once the key expires. hit() must run
    before the guarded operation touches anything else.
    Store faults propagate (StoreUnavailable): the gate fails closed.
    """

    def __init__(
        self,
        store: KeyValueStorePort,
        policies: Iterable[RateLimitPolicy],
        *,
        key_prefix: str = "rl:",
    ) -> None:
        self._store = store
        self._policies = {p.purpose: p for p in policies}
        self._prefix = key_prefix

    def policy(self, purpose: str) -> RateLimitPolicy:
        try:
            return self._policies[purpose]
        except KeyError:
            raise ValueError(f"no rate limit policy for {purpose!r}") from None

    def _key(self, purpose: str, identifier: str) -> str:
        normalized = (identifier or "").strip().lower() or "unknown"
        return f"{self._prefix}{purpose}:{normalized}"

    async def hit(self, purpose: str, identifier: str) -> RateLimitStatus:
        policy = self.policy(purpose)
        count = await self._store.increment_with_expiry(
            self._key(purpose, identifier), policy.window_seconds
        )
        status = RateLimitStatus(
            purpose=purpose,
            count=count,
            limit=policy.limit,
            window_seconds=policy.window_seconds,
        )
        if count > policy.limit:
            logger.info(
                "rate limit exceeded",
                extra={
                    "purpose": purpose,
                    "subject": fingerprint_secret(identifier or "")[:12],
                    "count": count,
                },
            )
            raise RateLimited(policy.message, retry_after=policy.window_seconds)
        return status
