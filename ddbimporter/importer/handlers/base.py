"""Per-kind import handlers and the converter interface they delegate to."""

from abc import ABC, abstractmethod
from typing import Any

from ddbimporter.models import HostDocument, kind_label

MODULE_SCOPE = "dndbeyond-importer"  # flag namespace on host documents


class ContentConverter(ABC):
    """Turns one provider payload into host documents."""

    @abstractmethod
    def convert(self, content_id: str, payload: Any) -> list[HostDocument]:
        ...


class ContentHandler(ABC):
    """Fetch, duplicate check, convert and persist one content item."""

    @property
    @abstractmethod
    def kind(self) -> str:
        """Content kind this handler imports (e.g., 'character')."""
        ...

    @property
    def label(self) -> str:
        return kind_label(self.kind)

    @abstractmethod
    async def import_content(self, content_id: str, overwrite: bool) -> None:
        """Import one item. Raises on any failure; the caller records it."""
        ...


class DuplicateContentError(Exception):
    def __init__(self, label: str, content_id: str) -> None:
        self.content_id = content_id
        super().__init__(f"{label} {content_id} already exists and overwrite is disabled")
