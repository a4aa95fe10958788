import logging

from authcore.application.messages import welcome_message
from authcore.application.otp_service import OtpService
from authcore.domain.entities import Identity
from authcore.domain.errors import InvalidOtp, InvalidStatusTransition, NotFound
from authcore.domain.ports.notifier import NotifierPort
from authcore.domain.ports.unit_of_work import UnitOfWorkPort

logger = logging.getLogger(__name__)


async def verify_identity(
    uow: UnitOfWorkPort,
    otp_service: OtpService,
    notifier: NotifierPort,
    email: str,
    code: str,
) -> Identity:
    normalized_email = email.strip().lower()

    async with uow as transaction:
        identity = await transaction.identities.get_by_email(normalized_email)
        if not identity:
            raise NotFound("User not found")
        if identity.verified:
            # refuse before touching the OTP so a pending reset code survives
            raise InvalidStatusTransition("Email already verified")
        identity.mark_verified()
        await transaction.identities.set_verified(identity.id)
        # a wrong code leaves the block uncommitted, rolling the write back
        if not await otp_service.verify(normalized_email, code):
            raise InvalidOtp()
        try:
            await transaction.commit()
        except Exception:
            # the code was consumed above; put it back so the user can retry
            await otp_service.store(normalized_email, code)
            raise

    subject, body = welcome_message(identity.name)
    if not await notifier.send(to=identity.email, subject=subject, body=body):
        logger.warning("welcome email not sent", extra={"identity_id": identity.id})
    return identity
