class DomainError(Exception):
    """Base class for all domain-level errors."""

    status_code: int = 500
    message: str = "internal error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class CredentialInvalid(DomainError):
    """Bearer credential is malformed or its signature does not verify."""

    status_code = 401
    message = "invalid or expired token"


class CredentialExpired(DomainError):
    """Bearer credential signature is fine but it is past its expiry."""

    status_code = 401
    message = "invalid or expired token"


class Unauthenticated(DomainError):
    """Fingerprint mismatch, revoked session or identity no longer eligible."""

    status_code = 401
    message = "invalid or expired token"


class Forbidden(Unauthenticated):
    """Authenticated identity lacks the role required for the action."""

    status_code = 403
    message = "You do not have permission to perform this action"


class InvalidCredentials(DomainError):
    """Contact address / password pair did not match."""

    status_code = 401
    message = "Invalid email or password"


class IdentityNotVerified(DomainError):
    status_code = 400
    message = "Please verify your email first"


class InvalidOtp(DomainError):
    """OTP missing, expired or wrong. Deliberately one error for all three."""

    status_code = 400
    message = "Invalid or expired OTP"


class RateLimited(DomainError):
    status_code = 429
    message = "Too many requests"

    def __init__(self, message: str | None = None, *, retry_after: int = 0) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class NotFound(DomainError):
    status_code = 404
    message = "not found"


class Conflict(DomainError):
    status_code = 409
    message = "already exists"


class StoreUnavailable(DomainError):
    """Key-value or durable store unreachable or timed out."""

    status_code = 503
    message = "service temporarily unavailable"


class NotificationFailed(DomainError):
    status_code = 500
    message = "Failed to send notification"


class InvalidStatusTransition(DomainError):
    """Tried to change an identity's state in a way that's not allowed."""

    status_code = 400
    message = "invalid status transition"
