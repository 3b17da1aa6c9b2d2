"""Async SQLite access: one shared connection, schema on connect, transactions."""

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

import aiosqlite

from ddbimporter.db.schema import SCHEMA_SQL, SCHEMA_VERSION

MEMORY = ":memory:"


class Database:
    """Thin async wrapper around aiosqlite.

    Statements commit immediately unless they run inside transaction().
    """

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection
        self._in_transaction = False

    @classmethod
    async def connect(cls, path: str = "ddbimporter.db") -> "Database":
        """Open `path`, enable foreign keys and create the tables."""
        conn = await aiosqlite.connect(path)
        conn.row_factory = aiosqlite.Row
        if path != MEMORY:
            await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        await conn.execute("PRAGMA busy_timeout=5000")
        db = cls(conn)
        await db._ensure_schema()
        return db

    async def _ensure_schema(self) -> None:
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.execute(f"PRAGMA user_version={SCHEMA_VERSION}")
        await self._conn.commit()

    async def schema_version(self) -> int:
        row = await self.fetchone("PRAGMA user_version")
        return row[0] if row is not None else 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["Database"]:
        """Group statements into one commit; roll back if the block raises.

        Not reentrant: a nested transaction() raises RuntimeError.
        """
        if self._in_transaction:
            raise RuntimeError("transaction already open")
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            await self._conn.rollback()
            raise
        else:
            await self._conn.commit()
        finally:
            self._in_transaction = False

    async def execute(self, sql: str, params: tuple | None = None) -> aiosqlite.Cursor:
        cursor = await self._conn.execute(sql, params or ())
        await self._maybe_commit()
        return cursor

    async def executemany(self, sql: str, rows: Iterable[tuple]) -> None:
        await self._conn.executemany(sql, rows)
        await self._maybe_commit()

    async def fetchone(self, sql: str, params: tuple | None = None) -> aiosqlite.Row | None:
        cursor = await self._conn.execute(sql, params or ())
        return await cursor.fetchone()

    async def fetchall(self, sql: str, params: tuple | None = None) -> list[aiosqlite.Row]:
        cursor = await self._conn.execute(sql, params or ())
        return list(await cursor.fetchall())

    async def close(self) -> None:
        await self._conn.close()

    async def _maybe_commit(self) -> None:
        if not self._in_transaction:
            await self._conn.commit()
