import pytest

from authcore.settings import Settings, get_settings


def test_defaults(monkeypatch):
    for var in ("APP_ENV", "ACCESS_TOKEN_TTL", "REFRESH_TOKEN_TTL"):
        monkeypatch.delenv(var, raising=False)
    s = Settings(_env_file=None)
    assert s.is_production is False
    assert s.refresh_cookie_secure is False
    assert s.access_token_ttl_seconds == 15 * 60
    assert s.refresh_token_ttl_seconds == 7 * 24 * 3600
    assert s.rotate_refresh_on_use is False
    assert s.otp_ttl_seconds == 300
    assert s.db_statement_timeout_ms == 5000


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("APP_ENV", "Production")
    monkeypatch.setenv("ACCESS_TOKEN_TTL", "5m")
    monkeypatch.setenv("REFRESH_TOKEN_TTL", "1d")
    monkeypatch.setenv("ROTATE_REFRESH_ON_USE", "true")
    s = Settings(_env_file=None)
    assert s.is_production is True
    assert s.refresh_cookie_secure is True
    assert s.access_token_ttl_seconds == 300
    assert s.refresh_token_ttl_seconds == 86400
    assert s.rotate_refresh_on_use is True


def test_malformed_ttl_rejected_at_load(monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN_TTL", "soon")
    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_get_settings_is_cached():
    get_settings.cache_clear()
    assert get_settings() is get_settings()
    get_settings.cache_clear()
