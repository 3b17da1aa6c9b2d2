"""Per-kind import handlers."""

from ddbimporter.host.gateway import HostGateway
from ddbimporter.importer.handlers.base import ContentHandler, DuplicateContentError
from ddbimporter.importer.handlers.character import CharacterHandler
from ddbimporter.importer.handlers.compendium import CompendiumHandler
from ddbimporter.importer.handlers.converters import EmptyConverter, SampleAdventureConverter
from ddbimporter.provider.client import DnDBeyondClient
from ddbimporter.settings.store import SettingsStore


def build_handlers(
    client: DnDBeyondClient,
    gateway: HostGateway,
    settings: SettingsStore | None = None,
) -> list[ContentHandler]:
    """One handler per content kind, wired to the given collaborators."""
    return [
        CompendiumHandler("adventure", gateway, SampleAdventureConverter(), settings),
        CompendiumHandler("sourcebook", gateway, EmptyConverter(), settings),
        CompendiumHandler("homebrew", gateway, EmptyConverter(), settings),
        CharacterHandler(client, gateway),
    ]


__all__ = [
    "CharacterHandler",
    "CompendiumHandler",
    "ContentHandler",
    "DuplicateContentError",
    "build_handlers",
]
