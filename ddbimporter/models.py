"""Canonical data structures shared by the provider, host and importer layers.

Defined once here, referenced everywhere else. Content kinds are a closed
set; adding one means a new entry in CONTENT_KINDS and KIND_LABELS plus a
handler registered for it.
"""

from datetime import datetime
from typing import Any, Literal, get_args

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Content kinds
# ---------------------------------------------------------------------------

ContentKind = Literal["adventure", "sourcebook", "homebrew", "character"]

CONTENT_KINDS: tuple[str, ...] = get_args(ContentKind)

KIND_LABELS: dict[str, str] = {
    "adventure": "Adventure",
    "sourcebook": "Sourcebook",
    "homebrew": "Homebrew Content",
    "character": "Character",
}


def kind_label(kind: str) -> str:
    """Human-readable name for a content kind ("Content" if unknown)."""
    return KIND_LABELS.get(kind, "Content")


# ---------------------------------------------------------------------------
# Provider-side content
# ---------------------------------------------------------------------------


class ContentReference(BaseModel):
    id: str
    name: str
    kind: ContentKind
    description: str | None = None  # characters: "Level 5 Hill Dwarf Cleric"


class ContentSet(BaseModel):
    """Owned digital content, partitioned by kind. Characters are listed separately."""

    adventures: list[ContentReference] = Field(default_factory=list)
    sourcebooks: list[ContentReference] = Field(default_factory=list)
    homebrew: list[ContentReference] = Field(default_factory=list)

    def all(self) -> list[ContentReference]:
        return [*self.adventures, *self.sourcebooks, *self.homebrew]

    def by_kind(self, kind: str) -> list[ContentReference]:
        return {
            "adventure": self.adventures,
            "sourcebook": self.sourcebooks,
            "homebrew": self.homebrew,
        }.get(kind, [])


class Session(BaseModel):
    credential: str | None = None
    authenticated: bool = False
    profile: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Host-side documents
# ---------------------------------------------------------------------------


class HostDocument(BaseModel):
    """A document in the host's schema (actor, item, journal entry...)."""

    name: str
    type: str
    img: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    flags: dict[str, Any] = Field(default_factory=dict)


class StoredDocument(HostDocument):
    document_id: str
    collection: str | None = None
    created_at: datetime
    updated_at: datetime


class HostCollection(BaseModel):
    """A named content collection (compendium pack) in the host."""

    name: str
    label: str
    kind: str
    path: str
    system: str | None = None
    private: bool = False
    created_at: datetime


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class Notification(BaseModel):
    level: Literal["info", "warning", "error"]
    message: str
    created_at: datetime
