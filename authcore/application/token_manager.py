from __future__ import annotations

import logging
from dataclasses import dataclass

from authcore.domain.entities import TokenClaims
from authcore.domain.errors import Unauthenticated
from authcore.domain.ports.key_value_store import KeyValueStorePort
from authcore.domain.ports.token_signer import TokenSignerPort
from authcore.domain.services import fingerprint_secret, secure_compare

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    # None when rotate() leaves the refresh token in place
    refresh_token: str | None = None


class TokenLifecycleManager:
    """
    Issues stateless access tokens and long-lived refresh tokens.

    The only server-side state is one refresh fingerprint per identity, stored
    under ``refresh_token:<identity id>`` with the refresh lifetime as TTL.
    persist_refresh() overwrites that slot, so a new login invalidates the
    previous session's refresh token.

    With ``rotate_refresh=False`` rotate() returns a new access token only and
    the presented refresh token stays valid until it expires or is replaced.
    With ``rotate_refresh=True`` rotate() also swaps the fingerprint for a new
    refresh token via compare-and-set, so the presented token is single-use and
    concurrent rotations with the same token have exactly one winner.
    """

    def __init__(
        self,
        store: KeyValueStorePort,
        *,
        access_signer: TokenSignerPort,
        refresh_signer: TokenSignerPort,
        rotate_refresh: bool = False,
        key_prefix: str = "refresh_token:",
    ) -> None:
        self._store = store
        self._access = access_signer
        self._refresh = refresh_signer
        self.rotate_refresh = rotate_refresh
        self._prefix = key_prefix

    def _key(self, identity_id: str) -> str:
        return f"{self._prefix}{identity_id}"

    @property
    def refresh_ttl_seconds(self) -> int:
        return self._refresh.ttl_seconds

    def issue_access(self, identity_id: str) -> str:
        return self._access.sign(identity_id)

    def issue_refresh(self, identity_id: str) -> str:
        return self._refresh.sign(identity_id)

    def verify_access(self, token: str) -> TokenClaims:
        return self._access.verify(token)

    def verify_refresh(self, token: str) -> TokenClaims:
        return self._refresh.verify(token)

    async def persist_refresh(self, identity_id: str, raw_token: str) -> None:
        await self._store.set(
            self._key(identity_id),
            fingerprint_secret(raw_token),
            self._refresh.ttl_seconds,
        )

    async def issue_session(self, identity_id: str) -> TokenPair:
        """Login: fresh access + refresh pair, refresh fingerprint persisted."""
        refresh = self.issue_refresh(identity_id)
        await self.persist_refresh(identity_id, refresh)
        return TokenPair(
            access_token=self.issue_access(identity_id), refresh_token=refresh
        )

    async def rotate(self, identity_id: str, presented_raw_token: str) -> TokenPair:
        claims = self.verify_refresh(presented_raw_token)
        if claims.subject != identity_id:
            raise Unauthenticated()

        presented = fingerprint_secret(presented_raw_token)
        stored = await self._store.get(self._key(identity_id))
        if stored is None or not secure_compare(stored, presented):
            logger.info("refresh token rejected", extra={"identity_id": identity_id})
            raise Unauthenticated()

        if not self.rotate_refresh:
            return TokenPair(access_token=self.issue_access(identity_id))

        new_refresh = self.issue_refresh(identity_id)
        swapped = await self._store.compare_and_set(
            self._key(identity_id),
            presented,
            fingerprint_secret(new_refresh),
            self._refresh.ttl_seconds,
        )
        if not swapped:
            logger.info(
                "refresh token lost rotation race", extra={"identity_id": identity_id}
            )
            raise Unauthenticated()
        return TokenPair(
            access_token=self.issue_access(identity_id), refresh_token=new_refresh
        )

    async def revoke(self, identity_id: str) -> None:
        await self._store.delete(self._key(identity_id))
