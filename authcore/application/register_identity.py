from typing import Callable

from authcore.application.messages import verification_message
from authcore.application.otp_service import OtpService
from authcore.domain.entities import Identity
from authcore.domain.errors import Conflict, NotificationFailed
from authcore.domain.ports.notifier import NotifierPort
from authcore.domain.ports.unit_of_work import UnitOfWorkPort


async def register_identity(
    uow: UnitOfWorkPort,
    otp_service: OtpService,
    notifier: NotifierPort,
    name: str,
    email: str,
    password: str,
    hash_password: Callable[..., str],
) -> Identity:
    normalized_email = email.strip().lower()
    hashed_password = hash_password(password)

    async with uow as transaction:
        if await transaction.identities.get_by_email(normalized_email):
            raise Conflict("User already exists")
        identity = await transaction.identities.create_unverified(
            name=name.strip(), email=normalized_email, password_hash=hashed_password
        )
        code = await otp_service.issue(normalized_email)
        subject, body = verification_message(code, otp_service.ttl_seconds)
        if not await notifier.send(to=normalized_email, subject=subject, body=body):
            # leaving the block uncommitted rolls the identity back
            await otp_service.invalidate(normalized_email)
            raise NotificationFailed("Failed to send verification email")
        await transaction.commit()
    return identity
