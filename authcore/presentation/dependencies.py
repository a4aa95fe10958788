from typing import Callable, Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from authcore.application.otp_service import OtpService
from authcore.application.rate_limiter import API, RateLimiter, default_policies
from authcore.application.response_cache import ResponseCache
from authcore.application.session_guard import SessionGuard, require_role
from authcore.application.token_manager import TokenLifecycleManager
from authcore.domain.entities import Identity
from authcore.domain.ports.identity_repository import IdentityReaderPort
from authcore.domain.ports.key_value_store import KeyValueStorePort
from authcore.domain.ports.notifier import NotifierPort
from authcore.domain.ports.unit_of_work import UnitOfWorkPort
from authcore.infrastructure.db.identities_repo import PgIdentityReader
from authcore.infrastructure.db.uow import PgUnitOfWork
from authcore.infrastructure.security.password import hash_password, verify_password
from authcore.infrastructure.security.tokens import JwtSigner
from authcore.settings import Settings, get_settings

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings() -> Settings:
    return get_settings()


# Clients below are built once in app.main lifespan() and live on app.state.


def get_kv_store(request: Request) -> KeyValueStorePort:
    return request.app.state.kv_store


def get_uow(request: Request) -> UnitOfWorkPort:
    return PgUnitOfWork(request.app.state.db_pool)


def get_identity_reader(request: Request) -> IdentityReaderPort:
    return PgIdentityReader(request.app.state.db_pool)


def get_notifier(request: Request) -> NotifierPort:
    return request.app.state.notifier


def get_response_cache(
    request: Request,
    store: KeyValueStorePort = Depends(get_kv_store),
    settings: Settings = Depends(get_app_settings),
) -> ResponseCache:
    return ResponseCache(
        store,
        request.app.state.cache_invalidator,
        default_ttl=settings.cache_ttl_seconds,
    )


def get_hash_password() -> Callable[..., str]:
    return hash_password


def get_verify_password() -> Callable[[str, Optional[str]], bool]:
    return verify_password


def get_token_manager(
    store: KeyValueStorePort = Depends(get_kv_store),
    settings: Settings = Depends(get_app_settings),
) -> TokenLifecycleManager:
    return TokenLifecycleManager(
        store,
        access_signer=JwtSigner(
            secret=settings.jwt_access_secret,
            ttl_seconds=settings.access_token_ttl_seconds,
            token_type="access",
            algorithm=settings.jwt_algorithm,
        ),
        refresh_signer=JwtSigner(
            secret=settings.jwt_refresh_secret,
            ttl_seconds=settings.refresh_token_ttl_seconds,
            token_type="refresh",
            algorithm=settings.jwt_algorithm,
        ),
        rotate_refresh=settings.rotate_refresh_on_use,
    )


def get_otp_service(
    store: KeyValueStorePort = Depends(get_kv_store),
    settings: Settings = Depends(get_app_settings),
) -> OtpService:
    return OtpService(store, ttl_seconds=settings.otp_ttl_seconds)


def get_rate_limiter(
    store: KeyValueStorePort = Depends(get_kv_store),
    settings: Settings = Depends(get_app_settings),
) -> RateLimiter:
    return RateLimiter(store, default_policies(production=settings.is_production))


def get_session_guard(
    tokens: TokenLifecycleManager = Depends(get_token_manager),
    identities: IdentityReaderPort = Depends(get_identity_reader),
) -> SessionGuard:
    return SessionGuard(tokens, identities)


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def api_rate_limit(
    request: Request, limiter: RateLimiter = Depends(get_rate_limiter)
) -> None:
    await limiter.hit(API, client_address(request))


async def get_current_identity(
    auth: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    guard: SessionGuard = Depends(get_session_guard),
) -> Identity:
    return await guard.authenticate(auth.credentials if auth else None)


async def require_admin(
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    return require_role(identity, "admin")
