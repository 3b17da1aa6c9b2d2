"""Settings store: module options persisted in SQLite with change listeners."""

import inspect
import json
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from ddbimporter.db.connection import Database
from ddbimporter.utils.json import parse_json_value

logger = logging.getLogger(__name__)

ChangeListener = Callable[[Any], Awaitable[None] | None]


@dataclass(frozen=True)
class SettingDefinition:
    key: str
    name: str
    hint: str
    type: type
    default: Any
    config: bool = True  # shown in the settings form
    secret: bool = False


SETTINGS: dict[str, SettingDefinition] = {
    d.key: d
    for d in (
        SettingDefinition(
            key="cobaltCookie",
            name="D&D Beyond Cobalt Cookie",
            hint=(
                "Your D&D Beyond CobaltSession cookie value for authentication. "
                "This is stored locally and never shared."
            ),
            type=str,
            default="",
            secret=True,
        ),
        SettingDefinition(
            key="importPath",
            name="Import Path",
            hint="The path where imported content will be stored",
            type=str,
            default="dndbeyond",
        ),
        SettingDefinition(
            key="lastImport",
            name="Last Import",
            hint="Timestamp of the last successful import",
            type=str,
            default="",
            config=False,
        ),
        SettingDefinition(
            key="debugMode",
            name="Debug Mode",
            hint="Enable debug logging for troubleshooting",
            type=bool,
            default=False,
        ),
    )
}


class SettingsStore:
    """Typed key/value options. Listeners run after a value is stored."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self._listeners: dict[str, list[ChangeListener]] = defaultdict(list)

    @staticmethod
    def definition(key: str) -> SettingDefinition:
        try:
            return SETTINGS[key]
        except KeyError:
            raise UnknownSettingError(key)

    async def get(self, key: str) -> Any:
        """Return the stored value, or the declared default."""
        definition = self.definition(key)
        row = await self._db.fetchone("SELECT value FROM settings WHERE key = ?", (key,))
        if row is None:
            return definition.default
        value = parse_json_value(row["value"], definition.default)
        if not isinstance(value, definition.type):
            logger.warning("Setting %r has a stored value of the wrong type, using default", key)
            return definition.default
        return value

    async def get_all(self) -> dict[str, Any]:
        return {key: await self.get(key) for key in SETTINGS}

    async def set(self, key: str, value: Any) -> Any:
        """Store a value and notify listeners. Returns the stored value."""
        definition = self.definition(key)
        # bool is a subclass of int; keep the check strict both ways
        if type(value) is not definition.type:
            raise InvalidSettingError(key, definition.type, value)

        await self._db.execute(
            """
            INSERT INTO settings (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, json.dumps(value), datetime.now(UTC).isoformat()),
        )
        if definition.secret:
            logger.debug("Setting %r updated", key)
        else:
            logger.debug("Setting %r updated to %r", key, value)

        for listener in self._listeners.get(key, []):
            result = listener(value)
            if inspect.isawaitable(result):
                await result
        return value

    def on_change(self, key: str, listener: ChangeListener) -> None:
        """Register a callback invoked with the new value after set()."""
        self.definition(key)
        self._listeners[key].append(listener)


class UnknownSettingError(Exception):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Unknown setting: {key}")


class InvalidSettingError(Exception):
    def __init__(self, key: str, expected: type, value: Any) -> None:
        self.key = key
        super().__init__(
            f"Setting {key} expects {expected.__name__}, got {type(value).__name__}"
        )
