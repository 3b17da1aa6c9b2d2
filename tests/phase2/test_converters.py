"""Tests for the content converters."""

from ddbimporter.importer.handlers.converters import (
    DEFAULT_IMAGE,
    CharacterConverter,
    EmptyConverter,
    SampleAdventureConverter,
)
from tests.fixtures import make_character_payload


class TestCharacterConverter:
    def test_maps_abilities_and_attributes(self):
        payload = make_character_payload(
            1001, "Tordek", stats=[16, 12, 15, 10, 13, 8], hit_points=28, armor_class=18,
            avatar_url="https://img/tordek.png",
        )
        [actor] = CharacterConverter().convert("1001", payload)
        assert actor.name == "Tordek"
        assert actor.type == "character"
        assert actor.img == "https://img/tordek.png"
        abilities = actor.data["abilities"]
        assert {k: v["value"] for k, v in abilities.items()} == {
            "str": 16, "dex": 12, "con": 15, "int": 10, "wis": 13, "cha": 8,
        }
        assert actor.data["attributes"]["hp"] == {"value": 28, "max": 28}
        assert actor.data["attributes"]["ac"] == {"value": 18}

    def test_flags_character_id_as_string(self):
        [actor] = CharacterConverter().convert("1001", make_character_payload(1001))
        flags = actor.flags["dndbeyond-importer"]
        assert flags["characterId"] == "1001"
        assert "lastUpdated" in flags

    def test_defaults_for_missing_stats_and_avatar(self):
        payload = {"id": 5, "name": "Blank", "stats": [{"id": 1, "value": 14}]}
        [actor] = CharacterConverter().convert("5", payload)
        assert actor.img == DEFAULT_IMAGE
        assert actor.data["abilities"]["str"]["value"] == 14
        assert actor.data["abilities"]["cha"]["value"] == 10


class TestPlaceholderConverters:
    def test_adventure_sample_npc(self):
        [npc] = SampleAdventureConverter().convert("A1", {"id": "A1"})
        assert npc.name == "Sample NPC"
        assert npc.type == "npc"
        assert all(v == {"value": 10} for v in npc.data["abilities"].values())

    def test_empty_converter(self):
        assert EmptyConverter().convert("S1", {"id": "S1"}) == []
