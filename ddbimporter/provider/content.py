"""Listing of owned content and characters for the selection dialog."""

import logging
from typing import Any

from ddbimporter.models import ContentReference, ContentSet, Session
from ddbimporter.provider.client import AuthError, DnDBeyondClient

logger = logging.getLogger(__name__)

_LISTED_KINDS = {"adventure", "sourcebook", "homebrew"}


class ContentLister:
    def __init__(self, client: DnDBeyondClient) -> None:
        self._client = client

    async def list_content(self, session: Session) -> ContentSet:
        """Owned digital content, partitioned by kind.

        Raises AuthError (no request made) for an unauthenticated session,
        FetchError if the provider call fails.
        """
        self._require_authenticated(session)
        data = await self._client.get_digital_content(session.credential)
        items = data.get("items") if isinstance(data, dict) else None

        content = ContentSet()
        skipped = 0
        for item in items or []:
            kind = item.get("type")
            if kind not in _LISTED_KINDS:
                skipped += 1
                continue
            content.by_kind(kind).append(
                ContentReference(id=str(item["id"]), name=item.get("name") or str(item["id"]), kind=kind)
            )
        if skipped:
            logger.debug("Skipped %d content items of unsupported type", skipped)
        return content

    async def list_characters(self, session: Session) -> list[ContentReference]:
        """The user's characters. Listed on demand, separately from content."""
        self._require_authenticated(session)
        data = await self._client.get_user_characters(session.credential)
        characters = data.get("data") if isinstance(data, dict) else None
        return [
            ContentReference(
                id=str(c["id"]),
                name=c.get("name") or str(c["id"]),
                kind="character",
                description=describe_character(c),
            )
            for c in characters or []
        ]

    @staticmethod
    def _require_authenticated(session: Session) -> None:
        if not session.authenticated:
            raise AuthError("Not authenticated with D&D Beyond")


def describe_character(character: dict[str, Any]) -> str:
    """Build e.g. "Level 5 Hill Dwarf Cleric/Fighter" from a character list entry."""
    parts = [f"Level {character.get('level', '?')}"]
    race = (character.get("race") or {}).get("fullName")
    if race:
        parts.append(race)
    classes = "/".join(
        c["definition"]["name"]
        for c in character.get("classes") or []
        if c.get("definition", {}).get("name")
    )
    if classes:
        parts.append(classes)
    return " ".join(parts)
