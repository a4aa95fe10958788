from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

import psycopg

from authcore.logging import setup_logging
from authcore.settings import get_settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(os.environ.get("MIGRATIONS_DIR", "migrations"))
SCHEMA_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version    text PRIMARY KEY,
  applied_at timestamptz NOT NULL DEFAULT now()
);
"""


def list_migrations(directory: Path = MIGRATIONS_DIR) -> list[Path]:
    if not directory.exists():
        raise FileNotFoundError(f"migrations dir not found: {directory}")
    return sorted(directory.glob("*.sql"))


async def applied_versions(conn: psycopg.AsyncConnection) -> set[str]:
    async with conn.cursor() as cur:
        await cur.execute(SCHEMA_TABLE_SQL)
        await cur.execute("SELECT version FROM schema_migrations ORDER BY version;")
        rows = await cur.fetchall()
    await conn.commit()
    return {r[0] for r in rows}


async def apply_one(conn: psycopg.AsyncConnection, path: Path) -> None:
    version = path.stem
    logger.info("applying migration", extra={"version": version})
    async with conn.cursor() as cur:
        await cur.execute(path.read_text(encoding="utf-8"))
        await cur.execute(
            "INSERT INTO schema_migrations (version, applied_at) VALUES (%s, now());",
            (version,),
        )
    await conn.commit()


async def migrate_up(dsn: str, directory: Path = MIGRATIONS_DIR) -> list[str]:
    """Apply every pending migration in order, stop at the first failure."""
    applied: list[str] = []
    async with await psycopg.AsyncConnection.connect(dsn) as conn:
        done = await applied_versions(conn)
        for path in list_migrations(directory):
            if path.stem in done:
                continue
            try:
                await apply_one(conn, path)
            except psycopg.Error:
                await conn.rollback()
                logger.exception("migration failed", extra={"version": path.stem})
                raise
            applied.append(path.stem)
    return applied


async def pending_versions(dsn: str, directory: Path = MIGRATIONS_DIR) -> list[str]:
    async with await psycopg.AsyncConnection.connect(dsn) as conn:
        done = await applied_versions(conn)
    return [p.stem for p in list_migrations(directory) if p.stem not in done]


def main(argv: list[str]) -> int:
    settings = get_settings()
    setup_logging(settings.log_level)
    cmd = argv[1] if len(argv) > 1 else ""
    if cmd == "up":
        try:
            applied = asyncio.run(migrate_up(settings.database_url))
        except FileNotFoundError as e:
            logger.error("migrations dir missing", extra={"error": str(e)})
            return 1
        except psycopg.Error:
            return 1
        logger.info("migrations applied", extra={"versions": applied})
        return 0
    if cmd == "status":
        pending = asyncio.run(pending_versions(settings.database_url))
        logger.info("pending migrations", extra={"versions": pending})
        return 0
    print(
        "usage: python -m authcore.infrastructure.db.migrate [up|status]",
        file=sys.stderr,
    )
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
