from typing import Annotated, Callable, Optional

from fastapi import APIRouter, Depends, Request, Response, status

from authcore.application.authenticate import login, logout, refresh_session
from authcore.application.otp_service import OtpService
from authcore.application.password_reset import request_password_reset, reset_password
from authcore.application.rate_limiter import LOGIN, OTP, RateLimiter
from authcore.application.register_identity import register_identity
from authcore.application.session_guard import SessionGuard
from authcore.application.token_manager import TokenLifecycleManager
from authcore.application.verify_identity import verify_identity
from authcore.domain.entities import Identity
from authcore.domain.ports.notifier import NotifierPort
from authcore.domain.ports.unit_of_work import UnitOfWorkPort
from authcore.presentation.dependencies import (
    client_address,
    get_app_settings,
    get_current_identity,
    get_hash_password,
    get_notifier,
    get_otp_service,
    get_rate_limiter,
    get_session_guard,
    get_token_manager,
    get_uow,
    get_verify_password,
)
from authcore.schemas.requests import (
    ForgotPasswordIn,
    LoginIn,
    RegisterIn,
    ResetPasswordIn,
    VerifyEmailIn,
)
from authcore.schemas.responses import (
    AccessTokenOut,
    Envelope,
    IdentityOut,
    LoginOut,
    success,
)
from authcore.settings import Settings

router = APIRouter(prefix="/auth", tags=["Auth"])


def _set_refresh_cookie(response: Response, settings: Settings, token: str) -> None:
    response.set_cookie(
        settings.refresh_cookie_name,
        value=token,
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite=settings.refresh_cookie_samesite,
        max_age=settings.refresh_cookie_max_age_seconds,
    )


@router.post("/register", status_code=201, response_model=Envelope)
async def post_register(
    body: RegisterIn,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    otp_service: Annotated[OtpService, Depends(get_otp_service)],
    notifier: Annotated[NotifierPort, Depends(get_notifier)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    await limiter.hit(OTP, body.email)
    identity = await register_identity(
        uow=uow,
        otp_service=otp_service,
        notifier=notifier,
        name=body.name,
        email=body.email,
        password=body.password,
        hash_password=hash_password,
    )
    return success(
        "Registration successful. Please verify your email",
        IdentityOut.from_identity(identity),
        code=201,
    )


@router.post("/verify-email", response_model=Envelope)
async def post_verify(
    body: VerifyEmailIn,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    otp_service: Annotated[OtpService, Depends(get_otp_service)],
    notifier: Annotated[NotifierPort, Depends(get_notifier)],
):
    await limiter.hit(OTP, body.email)
    identity = await verify_identity(
        uow=uow,
        otp_service=otp_service,
        notifier=notifier,
        email=body.email,
        code=body.otp,
    )
    return success("Email verified successfully", IdentityOut.from_identity(identity))


@router.post("/login", response_model=Envelope)
async def post_login(
    request: Request,
    response: Response,
    body: LoginIn,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    tokens: Annotated[TokenLifecycleManager, Depends(get_token_manager)],
    verify_password: Annotated[
        Callable[[str, Optional[str]], bool], Depends(get_verify_password)
    ],
    settings: Annotated[Settings, Depends(get_app_settings)],
):
    await limiter.hit(LOGIN, client_address(request))
    identity, pair = await login(
        uow=uow,
        tokens=tokens,
        email=body.email,
        password=body.password,
        verify_password=verify_password,
    )
    _set_refresh_cookie(response, settings, pair.refresh_token)
    return success(
        "Login successful",
        LoginOut(
            user=IdentityOut.from_identity(identity), access_token=pair.access_token
        ),
    )


@router.post("/refresh", response_model=Envelope)
async def post_refresh(
    request: Request,
    response: Response,
    guard: Annotated[SessionGuard, Depends(get_session_guard)],
    tokens: Annotated[TokenLifecycleManager, Depends(get_token_manager)],
    settings: Annotated[Settings, Depends(get_app_settings)],
):
    raw = request.cookies.get(settings.refresh_cookie_name)
    _, pair = await refresh_session(guard=guard, tokens=tokens, raw_refresh=raw)
    if pair.refresh_token:
        _set_refresh_cookie(response, settings, pair.refresh_token)
    return success(
        "Token refreshed successfully", AccessTokenOut(access_token=pair.access_token)
    )


@router.post("/logout", response_model=Envelope)
async def post_logout(
    response: Response,
    identity: Annotated[Identity, Depends(get_current_identity)],
    tokens: Annotated[TokenLifecycleManager, Depends(get_token_manager)],
    settings: Annotated[Settings, Depends(get_app_settings)],
):
    await logout(tokens, identity)
    response.delete_cookie(
        settings.refresh_cookie_name,
        httponly=True,
        secure=settings.refresh_cookie_secure,
        samesite=settings.refresh_cookie_samesite,
    )
    return success("Logged out successfully")


@router.post("/forgot-password", response_model=Envelope)
async def post_forgot_password(
    body: ForgotPasswordIn,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    otp_service: Annotated[OtpService, Depends(get_otp_service)],
    notifier: Annotated[NotifierPort, Depends(get_notifier)],
):
    await limiter.hit(OTP, body.email)
    await request_password_reset(
        uow=uow, otp_service=otp_service, notifier=notifier, email=body.email
    )
    return success("Password reset OTP sent to your email")


@router.post("/reset-password", response_model=Envelope)
async def post_reset_password(
    body: ResetPasswordIn,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    otp_service: Annotated[OtpService, Depends(get_otp_service)],
    tokens: Annotated[TokenLifecycleManager, Depends(get_token_manager)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    await limiter.hit(OTP, body.email)
    await reset_password(
        uow=uow,
        otp_service=otp_service,
        tokens=tokens,
        email=body.email,
        code=body.otp,
        new_password=body.password,
        hash_password=hash_password,
    )
    return success("Password reset successful. Please login with your new password")


@router.get("/me", response_model=Envelope, status_code=status.HTTP_200_OK)
async def get_me(identity: Annotated[Identity, Depends(get_current_identity)]):
    return success("User retrieved successfully", IdentityOut.from_identity(identity))
