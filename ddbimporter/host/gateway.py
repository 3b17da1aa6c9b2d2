"""Abstract interface to the tabletop host's persisted collections and documents."""

from abc import ABC, abstractmethod

from ddbimporter.models import HostCollection, HostDocument, StoredDocument


class HostGateway(ABC):
    """Narrow persistence surface the importer writes through."""

    @abstractmethod
    async def get_collection(self, name: str) -> HostCollection | None:
        """Look up a collection by name. None if it does not exist."""
        ...

    @abstractmethod
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
        """Create an empty collection. Raises CollectionExistsError if taken."""
        ...

    @abstractmethod
    async def clear_collection(self, name: str) -> int:
        """Delete every document in a collection. Returns how many were removed."""
        ...

    @abstractmethod
    async def list_collections(self) -> list[HostCollection]:
        ...

    @abstractmethod
    async def import_document(self, collection: str, document: HostDocument) -> str:
        """Add a document to a collection and return its id."""
        ...

    @abstractmethod
    async def import_documents(
        self, collection: str, documents: list[HostDocument]
    ) -> list[str]:
        """Add several documents at once; all or none are stored."""
        ...

    @abstractmethod
    async def find_document_by_flag(
        self, scope: str, key: str, value: str, *, doc_type: str | None = None
    ) -> StoredDocument | None:
        """Find a world document whose flags[scope][key] equals `value`."""
        ...

    @abstractmethod
    async def create_document(self, document: HostDocument) -> str:
        """Create a world document (outside any collection) and return its id."""
        ...

    @abstractmethod
    async def update_document(self, document_id: str, document: HostDocument) -> StoredDocument:
        """Replace a document's fields in place. Raises DocumentNotFoundError."""
        ...

    @abstractmethod
    async def get_document(self, document_id: str) -> StoredDocument | None:
        ...

    @abstractmethod
    async def list_documents(self, collection: str | None = None) -> list[StoredDocument]:
        """Documents in `collection`, or world documents when None."""
        ...


class CollectionExistsError(Exception):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Collection already exists: {name}")


class CollectionNotFoundError(Exception):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Collection not found: {name}")


class DocumentNotFoundError(Exception):
    def __init__(self, document_id: str) -> None:
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")
