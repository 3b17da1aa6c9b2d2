"""Character import: one host actor per D&D Beyond character."""

import logging

from ddbimporter.host.gateway import HostGateway
from ddbimporter.importer.handlers.base import (
    MODULE_SCOPE,
    ContentConverter,
    ContentHandler,
    DuplicateContentError,
)
from ddbimporter.importer.handlers.converters import CharacterConverter
from ddbimporter.provider.client import DnDBeyondClient, FetchError

logger = logging.getLogger(__name__)


class CharacterHandler(ContentHandler):
    """Fetches the character JSON and creates or replaces the flagged actor.

    The actor is matched by flags["dndbeyond-importer"]["characterId"], so a
    re-import with overwrite updates in place and never duplicates.
    """

    def __init__(
        self,
        client: DnDBeyondClient,
        gateway: HostGateway,
        converter: ContentConverter | None = None,
    ) -> None:
        self._client = client
        self._gateway = gateway
        self._converter = converter or CharacterConverter()

    @property
    def kind(self) -> str:
        return "character"

    async def import_content(self, content_id: str, overwrite: bool) -> None:
        logger.debug("Importing character %s (overwrite: %s)", content_id, overwrite)
        try:
            character = await self._client.get_character(content_id)
        except FetchError as e:
            if e.status_code is None:
                raise
            raise FetchError(
                f"Failed to fetch character data: {e.status_code}", status_code=e.status_code
            ) from e

        existing = await self._gateway.find_document_by_flag(
            MODULE_SCOPE, "characterId", content_id, doc_type="character"
        )
        if existing is not None and not overwrite:
            raise DuplicateContentError(self.label, content_id)

        documents = self._converter.convert(content_id, character)
        if not documents:
            raise ValueError(f"Character {content_id} produced no actor data")
        actor = documents[0]
        # match on the requested id even if the payload reports it differently
        actor.flags.setdefault(MODULE_SCOPE, {})["characterId"] = content_id

        if existing is not None:
            await self._gateway.update_document(existing.document_id, actor)
            logger.info("Updated actor %s for character %s", existing.document_id, content_id)
        else:
            document_id = await self._gateway.create_document(actor)
            logger.info("Created actor %s for character %s", document_id, content_id)
