import pytest

from authcore.application.register_identity import register_identity
from authcore.domain.errors import Conflict, NotificationFailed
from authcore.domain.services import fingerprint_secret


async def test_register_identity_happy_path(
    uow, repo, store, otp_service, notifier, hash_password_stub
):
    identity = await register_identity(
        uow=uow,
        otp_service=otp_service,
        notifier=notifier,
        name=" Jane ",
        email=" Jane@Example.COM ",
        password="s3cret-pass",
        hash_password=hash_password_stub,
    )

    assert identity.email == "jane@example.com"
    assert identity.name == "Jane"
    assert identity.verified is False
    assert repo.hashes[identity.id] == "hashed-s3cret-pass"
    assert uow.committed is True

    assert await store.get("otp:jane@example.com") == fingerprint_secret("123456")
    assert len(notifier.calls) == 1
    assert notifier.calls[0]["to"] == "jane@example.com"
    assert "123456" in notifier.calls[0]["body"]


async def test_register_duplicate_email(
    uow, repo, otp_service, notifier, hash_password_stub
):
    repo.seed("jane@example.com")
    with pytest.raises(Conflict, match="User already exists"):
        await register_identity(
            uow=uow,
            otp_service=otp_service,
            notifier=notifier,
            name="Jane",
            email="JANE@example.com",
            password="s3cret-pass",
            hash_password=hash_password_stub,
        )
    assert notifier.calls == []


async def test_register_send_failure_rolls_back(
    uow, repo, store, otp_service, notifier_down, hash_password_stub
):
    with pytest.raises(NotificationFailed):
        await register_identity(
            uow=uow,
            otp_service=otp_service,
            notifier=notifier_down,
            name="Jane",
            email="jane@example.com",
            password="s3cret-pass",
            hash_password=hash_password_stub,
        )

    assert uow.committed is False
    assert uow.rolled_back is True
    assert await repo.get_by_email("jane@example.com") is None
    assert await store.get("otp:jane@example.com") is None
