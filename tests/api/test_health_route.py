from fastapi.testclient import TestClient


class _Store:
    def __init__(self, ok: bool) -> None:
        self.ok = ok

    async def ping(self) -> bool:
        return self.ok


def test_healthz_without_store(client: TestClient):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "services": {"redis": "unavailable"}}


def test_healthz_with_store(client: TestClient, app_and_deps):
    app, _ = app_and_deps
    app.state.kv_store = _Store(ok=True)
    r = client.get("/healthz")
    assert r.json()["services"]["redis"] == "healthy"
