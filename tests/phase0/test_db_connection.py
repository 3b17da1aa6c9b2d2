"""Integration tests for database connection and schema.

Verifies SQLite setup (WAL mode, foreign keys, table creation).
"""

import os
import tempfile

import pytest

from ddbimporter.db.connection import Database


class TestDatabaseConnection:
    async def test_connect_creates_tables(self):
        """Database.connect creates settings, collections, and documents tables."""
        db = await Database.connect(":memory:")
        try:
            rows = await db.fetchall(
                "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
            )
            table_names = {row["name"] for row in rows}
            assert {"settings", "collections", "documents"} <= table_names
        finally:
            await db.close()

    async def test_wal_mode_on_file_database(self):
        """File-based database uses WAL journal mode."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "test.db")
            db = await Database.connect(path)
            try:
                row = await db.fetchone("PRAGMA journal_mode")
                assert row is not None
                assert row["journal_mode"] == "wal"
            finally:
                await db.close()

    async def test_foreign_keys_enabled(self):
        db = await Database.connect(":memory:")
        try:
            row = await db.fetchone("PRAGMA foreign_keys")
            assert row is not None
            assert row["foreign_keys"] == 1
        finally:
            await db.close()

    async def test_schema_idempotent(self):
        """Calling _ensure_schema twice does not error."""
        db = await Database.connect(":memory:")
        try:
            await db._ensure_schema()
            rows = await db.fetchall(
                "SELECT name FROM sqlite_master WHERE type='table'"
            )
            assert len(rows) >= 3
        finally:
            await db.close()

    async def test_deleting_collection_cascades_to_documents(self):
        db = await Database.connect(":memory:")
        try:
            await db.execute(
                "INSERT INTO collections (name, label, kind, path, created_at) "
                "VALUES ('adventure-1', 'Adventure 1', 'adventure', 'p', '2024-01-01')"
            )
            await db.execute(
                "INSERT INTO documents (document_id, collection_name, doc_type, name, "
                "created_at, updated_at) VALUES ('d1', 'adventure-1', 'npc', 'N', 'x', 'x')"
            )
            await db.execute("DELETE FROM collections WHERE name = 'adventure-1'")
            assert await db.fetchall("SELECT * FROM documents") == []
        finally:
            await db.close()

    async def test_schema_version_recorded(self, db):
        assert await db.schema_version() == 1


_INSERT_SETTING = "INSERT INTO settings (key, value, updated_at) VALUES (?, ?, 'x')"


class TestTransactions:
    async def test_commit_on_success(self, db):
        async with db.transaction():
            await db.executemany(_INSERT_SETTING, [("a", "1"), ("b", "2")])
        rows = await db.fetchall("SELECT key FROM settings ORDER BY key")
        assert [r["key"] for r in rows] == ["a", "b"]

    async def test_rollback_on_error(self, db):
        with pytest.raises(ValueError):
            async with db.transaction():
                await db.execute(_INSERT_SETTING, ("a", "1"))
                raise ValueError("boom")
        assert await db.fetchall("SELECT * FROM settings") == []

    async def test_not_reentrant(self, db):
        async with db.transaction():
            with pytest.raises(RuntimeError):
                async with db.transaction():
                    pass
