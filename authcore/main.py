from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from authcore.application.response_cache import PatternInvalidator
from authcore.infrastructure.db.pool import create_pool
from authcore.infrastructure.email.http_smtp_adapter import HttpSmtpNotifier
from authcore.infrastructure.redis_cache.pool import close_redis, create_redis
from authcore.infrastructure.redis_cache.store import RedisKeyValueStore
from authcore.logging import setup_logging
from authcore.presentation.api import api
from authcore.presentation.errors import register_exception_handlers
from authcore.settings import get_settings

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    pool = create_pool(
        settings.database_url, statement_timeout_ms=settings.db_statement_timeout_ms
    )
    await pool.open()

    redis = create_redis(settings.redis_url, timeout_seconds=settings.redis_timeout_seconds)
    kv_store = RedisKeyValueStore(redis)

    http_client = httpx.AsyncClient(timeout=settings.notification_timeout_seconds)
    notifier = HttpSmtpNotifier(base_url=settings.smtp_base_url, client=http_client)

    invalidator = PatternInvalidator(
        kv_store, max_concurrency=settings.cache_invalidation_concurrency
    )

    app.state.db_pool = pool
    app.state.kv_store = kv_store
    app.state.notifier = notifier
    app.state.cache_invalidator = invalidator

    try:
        yield
    finally:
        # shutdown
        await invalidator.drain(timeout=5.0)
        await notifier.aclose()  # it won't close the shared client
        await http_client.aclose()
        await close_redis(redis)
        await pool.close()


def create_app() -> FastAPI:
    setup_logging(settings.log_level)
    app = FastAPI(title="Auth Core API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    register_exception_handlers(app, settings)
    app.include_router(api)
    return app


app = create_app()
