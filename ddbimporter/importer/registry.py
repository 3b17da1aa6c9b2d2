"""Handler registry: maps each content kind to the handler that imports it."""

from ddbimporter.importer.handlers.base import ContentHandler
from ddbimporter.models import CONTENT_KINDS


class HandlerRegistry:
    def __init__(self, handlers: list[ContentHandler] | None = None) -> None:
        self._handlers: dict[str, ContentHandler] = {}
        for handler in handlers or []:
            self.register(handler)

    def register(self, handler: ContentHandler) -> None:
        """Register a handler by its kind. Replaces any existing one."""
        if handler.kind not in CONTENT_KINDS:
            raise UnknownContentKindError(handler.kind)
        self._handlers[handler.kind] = handler

    def get(self, kind: str) -> ContentHandler:
        """Get the handler for a kind. Raises UnknownContentKindError if none."""
        try:
            return self._handlers[kind]
        except KeyError:
            raise UnknownContentKindError(kind)

    def kinds(self) -> list[str]:
        return list(self._handlers.keys())


class UnknownContentKindError(Exception):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"No handler for content kind '{kind}'")
