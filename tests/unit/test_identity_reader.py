import uuid
from contextlib import asynccontextmanager

from authcore.infrastructure.db.identities_repo import PgIdentityReader


class _Cursor:
    def __init__(self, executed, row):
        self._executed = executed
        self._row = row

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return None

    async def execute(self, sql, params):
        self._executed.append((sql, params))

    async def fetchone(self):
        return self._row


class _Conn:
    def __init__(self, executed, row):
        self._executed = executed
        self._row = row

    def cursor(self):
        return _Cursor(self._executed, self._row)


class _Pool:
    def __init__(self, row=None):
        self.executed: list = []
        self.row = row

    @asynccontextmanager
    async def connection(self):
        yield _Conn(self.executed, self.row)


async def test_lookup_by_id_binds_a_uuid_against_the_primary_key():
    identity_id = uuid.uuid4()
    pool = _Pool(row=(identity_id, "jane@example.com", "Jane", True, "user"))

    found = await PgIdentityReader(pool).find_identity_by_id(str(identity_id))

    assert found.id == str(identity_id)
    sql, params = pool.executed[0]
    assert "WHERE id = %s" in sql
    assert "::text" not in sql
    assert params == (identity_id,)
    assert isinstance(params[0], uuid.UUID)


async def test_lookup_by_malformed_id_skips_the_query():
    pool = _Pool()
    assert await PgIdentityReader(pool).find_identity_by_id("not-a-uuid") is None
    assert pool.executed == []
