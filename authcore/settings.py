from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from authcore.domain.services import parse_duration


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Infra
    database_url: str = "postgresql://app:app@db:5432/app"
    db_statement_timeout_ms: int = 5000
    redis_url: str = "redis://redis:6379/0"
    redis_timeout_seconds: float = 2.0
    smtp_base_url: str = "http://smtp-mock:8025"
    notification_timeout_seconds: float = 5.0

    # Tokens
    jwt_access_secret: str = "dev-access-secret-change-me-0123456789"
    jwt_refresh_secret: str = "dev-refresh-secret-change-me-0123456789"
    jwt_algorithm: str = "HS256"
    access_token_ttl: str = "15m"
    refresh_token_ttl: str = "7d"
    rotate_refresh_on_use: bool = False

    # Refresh cookie
    refresh_cookie_name: str = "refreshToken"
    refresh_cookie_samesite: str = "none"
    refresh_cookie_max_age_seconds: int = 9 * 24 * 60 * 60

    # Security / policies
    bcrypt_rounds: int = 12
    otp_ttl_seconds: int = 300
    cache_ttl_seconds: int = 600
    cache_invalidation_concurrency: int = 4

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("access_token_ttl", "refresh_token_ttl")
    @classmethod
    def _check_duration(cls, v: str) -> str:
        parse_duration(v)
        return v

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def refresh_cookie_secure(self) -> bool:
        return self.is_production

    @property
    def access_token_ttl_seconds(self) -> int:
        return parse_duration(self.access_token_ttl)

    @property
    def refresh_token_ttl_seconds(self) -> int:
        return parse_duration(self.refresh_token_ttl)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
