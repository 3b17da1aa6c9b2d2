"""Compendium-backed kinds: adventures, sourcebooks and homebrew.

Each item becomes its own collection named "<kind>-<id>". Fetching the
source data for these kinds is not implemented by the provider client;
`fetch` is the seam where it plugs in, and by default the payload is just
the reference.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ddbimporter.host.gateway import HostGateway
from ddbimporter.importer.handlers.base import (
    ContentConverter,
    ContentHandler,
    DuplicateContentError,
)
from ddbimporter.settings.store import SettingsStore

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[Any]]


async def reference_payload(content_id: str) -> dict[str, Any]:
    return {"id": content_id}


class CompendiumHandler(ContentHandler):
    def __init__(
        self,
        kind: str,
        gateway: HostGateway,
        converter: ContentConverter,
        settings: SettingsStore | None = None,
        *,
        fetch: Fetcher = reference_payload,
        system: str | None = "dnd5e",
    ) -> None:
        self._kind = kind
        self._gateway = gateway
        self._converter = converter
        self._settings = settings
        self._fetch = fetch
        self._system = system

    @property
    def kind(self) -> str:
        return self._kind

    def collection_name(self, content_id: str) -> str:
        return f"{self._kind}-{content_id}"

    async def import_content(self, content_id: str, overwrite: bool) -> None:
        logger.debug("Importing %s %s (overwrite: %s)", self._kind, content_id, overwrite)
        payload = await self._fetch(content_id)

        name = self.collection_name(content_id)
        existing = await self._gateway.get_collection(name)
        if existing is not None and not overwrite:
            raise DuplicateContentError(self.label, content_id)

        if existing is not None:
            await self._gateway.clear_collection(name)
        else:
            import_path = await self._import_path()
            await self._gateway.create_collection(
                name,
                f"{self.label} {content_id}",
                self._kind,
                f"{import_path}/{name}.db",
                system=self._system,
            )

        documents = self._converter.convert(content_id, payload)
        await self._gateway.import_documents(name, documents)
        logger.debug("Imported %d documents into %s", len(documents), name)

    async def _import_path(self) -> str:
        if self._settings is None:
            return "dndbeyond"
        return (await self._settings.get("importPath")).strip("/") or "dndbeyond"
