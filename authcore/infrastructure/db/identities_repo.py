from __future__ import annotations

import uuid
from typing import Any, Optional

import psycopg
from psycopg import errors as pg_errors
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from authcore.domain.entities import Identity
from authcore.domain.errors import Conflict, StoreUnavailable
from authcore.domain.ports.identity_repository import (
    IdentityReaderPort,
    IdentityRepositoryPort,
)

_COLUMNS = "id, email, name, verified, role"


def _row_to_identity(row) -> Identity:
    id_, email, name, verified, role = row
    return Identity(
        id=str(id_),
        email=str(email),
        name=name or "",
        verified=bool(verified),
        role=role,
    )


class PgIdentityRepository(IdentityRepositoryPort):
    """
    Postgres implementation of IdentityRepositoryPort.

    NOTE:
    - This repo is constructed with an *active async connection* supplied by the UoW.
    - It does not commit; the UnitOfWork controls the transaction boundary.
    """

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def get_by_email(self, email: str) -> Optional[Identity]:
        sql = f"SELECT {_COLUMNS} FROM identities WHERE email = LOWER(TRIM(%s))"
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        return _row_to_identity(row) if row else None

    async def get_by_email_with_hash(
        self, email: str
    ) -> Optional[tuple[Identity, str]]:
        sql = f"""
        SELECT {_COLUMNS}, password_hash
        FROM identities
        WHERE email = LOWER(TRIM(%s))
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (email,))
            row = await cur.fetchone()
        if not row:
            return None
        return _row_to_identity(row[:5]), row[5]

    async def create_unverified(
        self, *, name: str, email: str, password_hash: str
    ) -> Identity:
        sql = f"""
        INSERT INTO identities (email, name, password_hash, verified, role)
        VALUES (LOWER(TRIM(%s)), %s, %s, false, 'user')
        RETURNING {_COLUMNS}
        """
        try:
            async with self._conn.cursor() as cur:
                await cur.execute(sql, (email, name, password_hash))
                row = await cur.fetchone()
        except pg_errors.UniqueViolation as e:
            raise Conflict("User already exists") from e
        if not row:
            raise RuntimeError("create_unverified returned no row")
        return _row_to_identity(row)

    async def delete(self, identity_id: str) -> None:
        async with self._conn.cursor() as cur:
            await cur.execute("DELETE FROM identities WHERE id = %s", (identity_id,))

    async def set_verified(self, identity_id: str) -> None:
        sql = """
        UPDATE identities
        SET verified = true, updated_at = now()
        WHERE id = %s
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (identity_id,))

    async def set_password_hash(self, identity_id: str, password_hash: str) -> None:
        sql = """
        UPDATE identities
        SET password_hash = %s, updated_at = now()
        WHERE id = %s
        """
        async with self._conn.cursor() as cur:
            await cur.execute(sql, (password_hash, identity_id))


class PgIdentityReader(IdentityReaderPort):
    """
    Read-only lookups on the authentication path, one pooled connection per call.
    Connectivity problems surface as StoreUnavailable.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def _fetch_one(self, sql: str, param: Any) -> Optional[Identity]:
        try:
            async with self._pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(sql, (param,))
                    row = await cur.fetchone()
        except (PoolTimeout, psycopg.OperationalError) as e:
            raise StoreUnavailable() from e
        return _row_to_identity(row) if row else None

    async def find_identity_by_id(self, identity_id: str) -> Optional[Identity]:
        # ids are uuids; anything else cannot match, so skip the round trip
        try:
            key = uuid.UUID(identity_id)
        except (TypeError, ValueError):
            return None
        sql = f"SELECT {_COLUMNS} FROM identities WHERE id = %s"
        return await self._fetch_one(sql, key)

    async def find_identity_by_contact(self, email: str) -> Optional[Identity]:
        sql = f"SELECT {_COLUMNS} FROM identities WHERE email = LOWER(TRIM(%s))"
        return await self._fetch_one(sql, email)
