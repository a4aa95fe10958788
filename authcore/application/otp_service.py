from __future__ import annotations

import logging

import authcore.domain.services as domain_services
from authcore.domain.ports.key_value_store import KeyValueStorePort

logger = logging.getLogger(__name__)

DEFAULT_OTP_TTL_SECONDS = 300


class OtpService:
    """
    Single-use numeric passcodes keyed by contact address.

    Only the fingerprint of the code is stored, under ``otp:<address>``, with a
    TTL. Storing a new code replaces any pending one, so only the newest code
    verifies. Verification is an atomic compare-and-delete: a match consumes
    the record, a mismatch leaves it in place, and "no record" is reported the
    same way as "wrong code".
    """

    def __init__(
        self,
        store: KeyValueStorePort,
        *,
        ttl_seconds: int = DEFAULT_OTP_TTL_SECONDS,
        key_prefix: str = "otp:",
    ) -> None:
        self._store = store
        self.ttl_seconds = ttl_seconds
        self._prefix = key_prefix

    def _key(self, identity_key: str) -> str:
        return f"{self._prefix}{identity_key.strip().lower()}"

    def generate(self) -> str:
        return domain_services.generate_otp()

    async def store(self, identity_key: str, code: str) -> None:
        await self._store.set(
            self._key(identity_key),
            domain_services.fingerprint_secret(code),
            self.ttl_seconds,
        )

    async def issue(self, identity_key: str) -> str:
        code = self.generate()
        await self.store(identity_key, code)
        return code

    async def verify(self, identity_key: str, candidate: str) -> bool:
        candidate = (candidate or "").strip()
        if not candidate.isdigit() or len(candidate) != domain_services.OTP_LENGTH:
            return False
        ok = await self._store.compare_and_delete(
            self._key(identity_key), domain_services.fingerprint_secret(candidate)
        )
        if not ok:
            logger.info("otp verification failed")
        return ok

    async def invalidate(self, identity_key: str) -> None:
        await self._store.delete(self._key(identity_key))
