import pytest

from authcore.application.otp_service import OtpService
from authcore.application.token_manager import TokenLifecycleManager
from authcore.infrastructure.security.tokens import JwtSigner
from tests.fakes import (
    FakeClock,
    FakeIdentityRepo,
    FakeKeyValueStore,
    FakeNotifier,
    FakeUoW,
)

ACCESS_SECRET = "test-access-secret-0123456789abcdef"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"


def make_token_manager(
    store, *, rotate_refresh=False, access_ttl=900, refresh_ttl=7 * 24 * 3600
):
    return TokenLifecycleManager(
        store,
        access_signer=JwtSigner(
            secret=ACCESS_SECRET, ttl_seconds=access_ttl, token_type="access"
        ),
        refresh_signer=JwtSigner(
            secret=REFRESH_SECRET, ttl_seconds=refresh_ttl, token_type="refresh"
        ),
        rotate_refresh=rotate_refresh,
    )


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return FakeKeyValueStore(clock)


@pytest.fixture()
def repo():
    return FakeIdentityRepo()


@pytest.fixture()
def uow(repo):
    return FakeUoW(repo)


@pytest.fixture()
def notifier():
    return FakeNotifier(ok=True)


@pytest.fixture()
def notifier_down():
    return FakeNotifier(ok=False)


@pytest.fixture()
def otp_service(store):
    return OtpService(store, ttl_seconds=300)


@pytest.fixture()
def tokens(store):
    return make_token_manager(store)


@pytest.fixture()
def strict_tokens(store):
    return make_token_manager(store, rotate_refresh=True)


@pytest.fixture()
def hash_password_stub():
    return lambda p: "hashed-" + p


@pytest.fixture()
def verify_password_stub():
    return lambda plain, hashed: hashed is not None and hashed == "hashed-" + plain


@pytest.fixture(autouse=True)
def patch_code(monkeypatch):
    """
    Make the 6-digit code deterministic in all tests.
    You can override in a specific test by re-monkeypatching.
    """
    from authcore.domain import services as domain_services

    monkeypatch.setattr(domain_services, "generate_otp", lambda: "123456")
    yield
