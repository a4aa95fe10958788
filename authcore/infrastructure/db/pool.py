from __future__ import annotations

from psycopg_pool import AsyncConnectionPool


def _add_connect_timeout(dsn: str, seconds: int = 3) -> str:
    if "connect_timeout=" in dsn:
        return dsn
    sep = "&" if "?" in dsn else "?"
    return f"{dsn}{sep}connect_timeout={seconds}"


def create_pool(
    dsn: str, *, timeout: float = 5.0, statement_timeout_ms: int = 5000
) -> AsyncConnectionPool:
    """
    Build a pool WITHOUT opening it; the app lifespan opens and closes it.
    `timeout` bounds how long a caller waits for a free connection and
    `statement_timeout_ms` how long the server runs any single statement.
    """
    return AsyncConnectionPool(
        _add_connect_timeout(dsn),
        min_size=1,
        max_size=10,
        timeout=timeout,
        kwargs={"options": f"-c statement_timeout={int(statement_timeout_ms)}"},
        open=False,  # created closed; caller decides when to open
    )
