from typing import Callable, Optional

from authcore.application.session_guard import SessionGuard
from authcore.application.token_manager import TokenLifecycleManager, TokenPair
from authcore.domain.entities import Identity
from authcore.domain.errors import IdentityNotVerified, InvalidCredentials
from authcore.domain.ports.unit_of_work import UnitOfWorkPort


async def login(
    uow: UnitOfWorkPort,
    tokens: TokenLifecycleManager,
    email: str,
    password: str,
    verify_password: Callable[[str, Optional[str]], bool],
) -> tuple[Identity, TokenPair]:
    normalized_email = email.strip().lower()

    async with uow as transaction:
        record = await transaction.identities.get_by_email_with_hash(normalized_email)

    if not record:
        verify_password(password, None)
        raise InvalidCredentials()
    identity, password_hash = record
    if not verify_password(password, password_hash):
        raise InvalidCredentials()
    if not identity.verified:
        raise IdentityNotVerified()

    pair = await tokens.issue_session(identity.id)
    return identity, pair


async def refresh_session(
    guard: SessionGuard,
    tokens: TokenLifecycleManager,
    raw_refresh: str | None,
) -> tuple[Identity, TokenPair]:
    identity = await guard.authenticate_refresh(raw_refresh)
    pair = await tokens.rotate(identity.id, raw_refresh)
    return identity, pair


async def logout(tokens: TokenLifecycleManager, identity: Identity) -> None:
    await tokens.revoke(identity.id)
