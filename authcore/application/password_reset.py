from typing import Callable

from authcore.application.messages import password_reset_message
from authcore.application.otp_service import OtpService
from authcore.application.token_manager import TokenLifecycleManager
from authcore.domain.errors import InvalidOtp, NotFound, NotificationFailed
from authcore.domain.ports.notifier import NotifierPort
from authcore.domain.ports.unit_of_work import UnitOfWorkPort


async def request_password_reset(
    uow: UnitOfWorkPort,
    otp_service: OtpService,
    notifier: NotifierPort,
    email: str,
) -> None:
    normalized_email = email.strip().lower()

    async with uow as transaction:
        identity = await transaction.identities.get_by_email(normalized_email)
    if not identity:
        raise NotFound("User not found")

    code = await otp_service.issue(normalized_email)
    subject, body = password_reset_message(code, otp_service.ttl_seconds)
    if not await notifier.send(to=normalized_email, subject=subject, body=body):
        await otp_service.invalidate(normalized_email)
        raise NotificationFailed("Failed to send password reset OTP")


async def reset_password(
    uow: UnitOfWorkPort,
    otp_service: OtpService,
    tokens: TokenLifecycleManager,
    email: str,
    code: str,
    new_password: str,
    hash_password: Callable[..., str],
) -> None:
    normalized_email = email.strip().lower()

    async with uow as transaction:
        identity = await transaction.identities.get_by_email(normalized_email)
        if not identity:
            raise NotFound("User not found")
        if not await otp_service.verify(normalized_email, code):
            raise InvalidOtp()
        await transaction.identities.set_password_hash(
            identity.id, hash_password(new_password)
        )
        await transaction.commit()

    # every refresh session issued under the old password ends here
    await tokens.revoke(identity.id)
