import pytest

from authcore.application.register_identity import register_identity
from authcore.application.verify_identity import verify_identity
from authcore.domain.errors import (
    InvalidOtp,
    InvalidStatusTransition,
    NotFound,
    StoreUnavailable,
)
from tests.fakes import FakeUoW


async def _register(uow, otp_service, notifier):
    return await register_identity(
        uow=uow,
        otp_service=otp_service,
        notifier=notifier,
        name="Jane",
        email="jane@example.com",
        password="s3cret-pass",
        hash_password=lambda p: "hashed-" + p,
    )


async def test_register_then_verify_once(uow, repo, otp_service, notifier):
    registered = await _register(uow, otp_service, notifier)

    with pytest.raises(InvalidOtp):
        await verify_identity(uow, otp_service, notifier, "jane@example.com", "000000")
    assert (await repo.find_identity_by_id(registered.id)).verified is False

    identity = await verify_identity(
        uow, otp_service, notifier, "Jane@Example.com", "123456"
    )
    assert identity.verified is True
    assert (await repo.find_identity_by_id(registered.id)).verified is True
    # the failed attempt wrote too, but was rolled back
    assert repo.set_verified_calls == [registered.id, registered.id]

    # the code is consumed and the identity is already verified
    with pytest.raises(InvalidStatusTransition):
        await verify_identity(uow, otp_service, notifier, "jane@example.com", "123456")
    assert await otp_service.verify("jane@example.com", "123456") is False


async def test_verify_sends_welcome_best_effort(uow, repo, otp_service, notifier_down):
    repo.seed("jane@example.com", verified=False)
    await otp_service.store("jane@example.com", "123456")

    identity = await verify_identity(
        uow, otp_service, notifier_down, "jane@example.com", "123456"
    )
    assert identity.verified is True
    assert notifier_down.calls[0]["subject"].startswith("Welcome")


async def test_verify_unknown_identity(uow, otp_service, notifier):
    with pytest.raises(NotFound):
        await verify_identity(uow, otp_service, notifier, "ghost@example.com", "123456")


async def test_verify_expired_code(uow, repo, clock, otp_service, notifier):
    repo.seed("jane@example.com", verified=False)
    await otp_service.store("jane@example.com", "123456")
    clock.advance(301)
    with pytest.raises(InvalidOtp):
        await verify_identity(uow, otp_service, notifier, "jane@example.com", "123456")


class _FailingCommitUoW(FakeUoW):
    async def commit(self) -> None:
        raise StoreUnavailable()


async def test_failed_commit_keeps_the_code_usable(repo, otp_service, notifier):
    seeded = repo.seed("jane@example.com", verified=False)
    await otp_service.store("jane@example.com", "123456")

    with pytest.raises(StoreUnavailable):
        await verify_identity(
            _FailingCommitUoW(repo), otp_service, notifier, "jane@example.com", "123456"
        )
    assert (await repo.find_identity_by_id(seeded.id)).verified is False
    assert notifier.calls == []

    identity = await verify_identity(
        FakeUoW(repo), otp_service, notifier, "jane@example.com", "123456"
    )
    assert identity.verified is True
    assert (await repo.find_identity_by_id(seeded.id)).verified is True


async def test_wrong_code_rolls_back_the_write(uow, repo, otp_service, notifier):
    seeded = repo.seed("jane@example.com", verified=False)
    await otp_service.store("jane@example.com", "123456")

    with pytest.raises(InvalidOtp):
        await verify_identity(uow, otp_service, notifier, "jane@example.com", "654321")
    assert uow.rolled_back is True
    assert (await repo.find_identity_by_id(seeded.id)).verified is False
    assert await otp_service.verify("jane@example.com", "123456") is True
