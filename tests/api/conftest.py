import pytest
from fastapi.testclient import TestClient

from authcore.main import create_app
from authcore.presentation.dependencies import (
    get_app_settings,
    get_hash_password,
    get_identity_reader,
    get_kv_store,
    get_notifier,
    get_uow,
    get_verify_password,
)
from authcore.settings import Settings
from tests.fakes import FakeIdentityRepo, FakeKeyValueStore, FakeNotifier, FakeUoW

PASSWORD = "s3cret-pass"


@pytest.fixture()
def settings():
    return Settings(_env_file=None, app_env="dev")


@pytest.fixture()
def app_and_deps(settings):
    app = create_app()
    repo = FakeIdentityRepo()
    store = FakeKeyValueStore()
    notifier = FakeNotifier(ok=True)

    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_kv_store] = lambda: store
    app.dependency_overrides[get_uow] = lambda: FakeUoW(repo)
    app.dependency_overrides[get_identity_reader] = lambda: repo
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_hash_password] = lambda: (lambda p: "hashed-" + p)
    app.dependency_overrides[get_verify_password] = lambda: (
        lambda plain, hashed: hashed is not None and hashed == "hashed-" + plain
    )

    try:
        yield app, {"repo": repo, "store": store, "notifier": notifier}
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def deps(app_and_deps):
    return app_and_deps[1]


@pytest.fixture()
def client(app_and_deps):
    app, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def verified_user(deps):
    return deps["repo"].seed("jane@example.com", "hashed-" + PASSWORD)


def login(client: TestClient, email: str, password: str = PASSWORD):
    return client.post("/v1/auth/login", json={"email": email, "password": password})


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def use_refresh_cookie(client: TestClient, token: str) -> None:
    client.cookies.clear()
    client.cookies.set("refreshToken", token)
