from __future__ import annotations

import logging

from authcore.application.token_manager import TokenLifecycleManager
from authcore.domain.entities import Identity
from authcore.domain.errors import Forbidden, Unauthenticated
from authcore.domain.ports.identity_repository import IdentityReaderPort

logger = logging.getLogger(__name__)


class SessionGuard:
    """
    Resolves a bearer access token to a live, verified Identity.

    The identity is re-read from the durable store on every call so a token
    stops working as soon as its identity is deleted or loses verification,
    even before the token itself expires.
    """

    def __init__(
        self, tokens: TokenLifecycleManager, identities: IdentityReaderPort
    ) -> None:
        self._tokens = tokens
        self._identities = identities

    async def authenticate(self, bearer: str | None) -> Identity:
        if not bearer:
            raise Unauthenticated()
        claims = self._tokens.verify_access(bearer)
        identity = await self._identities.find_identity_by_id(claims.subject)
        if identity is None or not identity.verified:
            logger.info("access token for ineligible identity")
            raise Unauthenticated()
        return identity

    async def authenticate_refresh(self, raw_refresh: str | None) -> Identity:
        """Identity bound to a refresh token; the fingerprint is checked by rotate()."""
        if not raw_refresh:
            raise Unauthenticated()
        claims = self._tokens.verify_refresh(raw_refresh)
        identity = await self._identities.find_identity_by_id(claims.subject)
        if identity is None:
            raise Unauthenticated()
        return identity


def require_role(identity: Identity, *roles: str) -> Identity:
    if not identity.has_role(*roles):
        raise Forbidden()
    return identity
