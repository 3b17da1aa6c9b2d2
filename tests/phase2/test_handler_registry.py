"""Contract tests for the handler registry."""

import pytest

from ddbimporter.importer.registry import HandlerRegistry, UnknownContentKindError
from tests.fixtures import RecordingHandler


class TestHandlerRegistry:
    def test_register_and_get(self):
        handler = RecordingHandler("adventure")
        registry = HandlerRegistry([handler])
        assert registry.get("adventure") is handler

    def test_get_unknown_raises(self):
        with pytest.raises(UnknownContentKindError):
            HandlerRegistry().get("character")

    def test_register_rejects_unknown_kind(self):
        with pytest.raises(UnknownContentKindError):
            HandlerRegistry().register(RecordingHandler("spell"))

    def test_register_replaces(self):
        first, second = RecordingHandler("homebrew"), RecordingHandler("homebrew")
        registry = HandlerRegistry([first])
        registry.register(second)
        assert registry.get("homebrew") is second
        assert registry.kinds() == ["homebrew"]
