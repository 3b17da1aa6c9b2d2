"""HostGateway backed by the local SQLite database."""

import logging
from datetime import UTC, datetime
from uuid import uuid4

from ddbimporter.db.connection import Database
from ddbimporter.host.gateway import (
    CollectionExistsError,
    CollectionNotFoundError,
    DocumentNotFoundError,
    HostGateway,
)
from ddbimporter.models import HostCollection, HostDocument, StoredDocument
from ddbimporter.utils.json import dump_json_field, parse_json_field

logger = logging.getLogger(__name__)

_INSERT_DOCUMENT = """
INSERT INTO documents
    (document_id, collection_name, doc_type, name, img, data, flags,
     created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


class SqliteHostGateway(HostGateway):
    def __init__(self, db: Database) -> None:
        self._db = db

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def get_collection(self, name: str) -> HostCollection | None:
        row = await self._db.fetchone("SELECT * FROM collections WHERE name = ?", (name,))
        return self._row_to_collection(row) if row is not None else None

    async def create_collection(
        self,
        name: str,
        label: str,
        kind: str,
        path: str,
        *,
        system: str | None = None,
        private: bool = False,
    ) -> HostCollection:
        if await self.get_collection(name) is not None:
            raise CollectionExistsError(name)
        now = datetime.now(UTC)
        await self._db.execute(
            """
            INSERT INTO collections (name, label, kind, path, system, private, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (name, label, kind, path, system, int(private), now.isoformat()),
        )
        logger.info("Created collection %s at %s", name, path)
        return HostCollection(
            name=name, label=label, kind=kind, path=path,
            system=system, private=private, created_at=now,
        )

    async def clear_collection(self, name: str) -> int:
        if await self.get_collection(name) is None:
            raise CollectionNotFoundError(name)
        cursor = await self._db.execute(
            "DELETE FROM documents WHERE collection_name = ?", (name,)
        )
        removed = cursor.rowcount if cursor.rowcount is not None else 0
        logger.info("Cleared %d documents from collection %s", removed, name)
        return removed

    async def list_collections(self) -> list[HostCollection]:
        rows = await self._db.fetchall("SELECT * FROM collections ORDER BY created_at, name")
        return [self._row_to_collection(r) for r in rows]

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def import_document(self, collection: str, document: HostDocument) -> str:
        if await self.get_collection(collection) is None:
            raise CollectionNotFoundError(collection)
        return await self._insert(document, collection)

    async def import_documents(
        self, collection: str, documents: list[HostDocument]
    ) -> list[str]:
        if await self.get_collection(collection) is None:
            raise CollectionNotFoundError(collection)
        now = datetime.now(UTC).isoformat()
        rows = [
            (str(uuid4()), collection, *self._document_columns(d), now, now)
            for d in documents
        ]
        async with self._db.transaction():
            await self._db.executemany(_INSERT_DOCUMENT, rows)
        logger.debug("Imported %d documents into %s", len(rows), collection)
        return [r[0] for r in rows]

    async def find_document_by_flag(
        self, scope: str, key: str, value: str, *, doc_type: str | None = None
    ) -> StoredDocument | None:
        if '"' in scope or '"' in key:
            raise ValueError(f"Flag scope and key cannot contain quotes: {scope!r}, {key!r}")
        # compared as text so a numeric flag matches its string form
        sql = """
            SELECT * FROM documents
            WHERE collection_name IS NULL
              AND CASE WHEN json_valid(flags)
                       THEN CAST(json_extract(flags, ?) AS TEXT) END = ?
        """
        params: tuple = (f'$."{scope}"."{key}"', str(value))
        if doc_type is not None:
            sql += " AND doc_type = ?"
            params += (doc_type,)
        row = await self._db.fetchone(sql + " ORDER BY created_at, rowid LIMIT 1", params)
        return self._row_to_document(row) if row is not None else None

    async def create_document(self, document: HostDocument) -> str:
        return await self._insert(document, None)

    async def update_document(self, document_id: str, document: HostDocument) -> StoredDocument:
        if await self.get_document(document_id) is None:
            raise DocumentNotFoundError(document_id)
        await self._db.execute(
            """
            UPDATE documents
            SET doc_type = ?, name = ?, img = ?, data = ?, flags = ?, updated_at = ?
            WHERE document_id = ?
            """,
            (*self._document_columns(document), datetime.now(UTC).isoformat(), document_id),
        )
        updated = await self.get_document(document_id)
        assert updated is not None
        return updated

    async def get_document(self, document_id: str) -> StoredDocument | None:
        row = await self._db.fetchone(
            "SELECT * FROM documents WHERE document_id = ?", (document_id,)
        )
        return self._row_to_document(row) if row is not None else None

    async def list_documents(self, collection: str | None = None) -> list[StoredDocument]:
        if collection is None:
            rows = await self._db.fetchall(
                "SELECT * FROM documents WHERE collection_name IS NULL ORDER BY created_at, rowid"
            )
        else:
            rows = await self._db.fetchall(
                "SELECT * FROM documents WHERE collection_name = ? ORDER BY created_at, rowid",
                (collection,),
            )
        return [self._row_to_document(r) for r in rows]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _insert(self, document: HostDocument, collection: str | None) -> str:
        document_id = str(uuid4())
        now = datetime.now(UTC).isoformat()
        await self._db.execute(
            _INSERT_DOCUMENT,
            (document_id, collection, *self._document_columns(document), now, now),
        )
        return document_id

    @staticmethod
    def _document_columns(document: HostDocument) -> tuple:
        """doc_type, name, img, data, flags."""
        return (
            document.type,
            document.name,
            document.img,
            dump_json_field(document.data),
            dump_json_field(document.flags),
        )

    @staticmethod
    def _row_to_collection(row) -> HostCollection:
        return HostCollection(
            name=row["name"],
            label=row["label"],
            kind=row["kind"],
            path=row["path"],
            system=row["system"],
            private=bool(row["private"]),
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_document(row) -> StoredDocument:
        return StoredDocument(
            document_id=row["document_id"],
            collection=row["collection_name"],
            type=row["doc_type"],
            name=row["name"],
            img=row["img"],
            data=parse_json_field(row["data"]) or {},
            flags=parse_json_field(row["flags"]) or {},
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
