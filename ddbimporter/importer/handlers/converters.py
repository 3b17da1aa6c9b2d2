"""Content converters.

Only characters have a real field mapping. Adventure conversion is the
placeholder sample NPC; sourcebooks and homebrew produce no documents until
a real conversion exists.
"""

from datetime import UTC, datetime
from typing import Any

from ddbimporter.importer.handlers.base import MODULE_SCOPE, ContentConverter
from ddbimporter.models import HostDocument

DEFAULT_IMAGE = "icons/svg/mystery-man.svg"

# D&D Beyond stat ids, in order
ABILITY_IDS = {"str": 1, "dex": 2, "con": 3, "int": 4, "wis": 5, "cha": 6}


class CharacterConverter(ContentConverter):
    """Map D&D Beyond character JSON onto a host actor."""

    def convert(self, content_id: str, payload: Any) -> list[HostDocument]:
        return [self.to_actor(payload, content_id)]

    @staticmethod
    def to_actor(character: dict[str, Any], content_id: str | None = None) -> HostDocument:
        stats = {s.get("id"): s.get("value") for s in character.get("stats") or []}
        abilities = {
            ability: {"value": stats.get(stat_id) or 10}
            for ability, stat_id in ABILITY_IDS.items()
        }
        hit_points = character.get("hitPoints")
        character_id = character.get("id", content_id)

        return HostDocument(
            name=character.get("name") or f"Character {character_id}",
            type="character",
            img=character.get("avatarUrl") or DEFAULT_IMAGE,
            data={
                "abilities": abilities,
                "attributes": {
                    "hp": {"value": hit_points, "max": hit_points},
                    "ac": {"value": character.get("armorClass")},
                },
            },
            flags={
                MODULE_SCOPE: {
                    "characterId": str(character_id),
                    "lastUpdated": datetime.now(UTC).isoformat(),
                }
            },
        )


class SampleAdventureConverter(ContentConverter):
    """Placeholder: one sample NPC per adventure."""

    def convert(self, content_id: str, payload: Any) -> list[HostDocument]:
        return [
            HostDocument(
                name="Sample NPC",
                type="npc",
                img=DEFAULT_IMAGE,
                data={"abilities": {a: {"value": 10} for a in ABILITY_IDS}},
            )
        ]


class EmptyConverter(ContentConverter):
    def convert(self, content_id: str, payload: Any) -> list[HostDocument]:
        return []
