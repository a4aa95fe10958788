import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from authcore.domain.errors import (
    CredentialExpired,
    CredentialInvalid,
    DomainError,
    Forbidden,
    RateLimited,
    Unauthenticated,
)
from authcore.settings import Settings

log = logging.getLogger(__name__)

_CREDENTIAL_ERRORS = (CredentialInvalid, CredentialExpired, Unauthenticated)
_CREDENTIAL_MESSAGE = "invalid or expired token"


def error_body(
    message: str, code: int, *, exc: BaseException | None = None, debug: bool = False
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "status": "error",
        "message": message,
        "code": code,
        "data": None,
    }
    if debug and exc is not None:
        body["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return body


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    debug = not settings.is_production

    @app.exception_handler(DomainError)
    async def handle_domain_error(request: Request, exc: DomainError):
        message = exc.message
        headers = None
        if isinstance(exc, _CREDENTIAL_ERRORS) and not isinstance(exc, Forbidden):
            message = _CREDENTIAL_MESSAGE
        if isinstance(exc, RateLimited) and exc.retry_after:
            headers = {"Retry-After": str(exc.retry_after)}
        if exc.status_code >= 500:
            log.warning(
                "request_failed",
                extra={"path": request.url.path, "error": type(exc).__name__},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(message, exc.status_code, exc=exc, debug=debug),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = str(errors[0].get("msg")) if errors else "Invalid request"
        return JSONResponse(
            status_code=422,
            content=error_body(message, 422, exc=exc, debug=debug),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), exc.status_code, exc=exc, debug=debug),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        log.exception("unhandled_error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error", 500, exc=exc, debug=debug),
        )
