"""Shared test helpers: fake provider responses and fake handlers."""

import asyncio
from collections.abc import Callable
from typing import Any

import httpx

from ddbimporter.importer.handlers.base import ContentHandler
from ddbimporter.provider.client import DnDBeyondClient

TEST_BASE_URL = "https://ddb.test"
COOKIE = "cobalt-test-cookie"


def make_character_payload(
    character_id: int | str = 1001,
    name: str = "Tordek",
    *,
    stats: list[int] | None = None,
    hit_points: int = 28,
    armor_class: int = 18,
    avatar_url: str | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Character JSON as returned by /api/character/{id}/json."""
    values = stats or [16, 12, 15, 10, 13, 8]
    payload = {
        "id": character_id,
        "name": name,
        "stats": [{"id": i + 1, "value": v} for i, v in enumerate(values)],
        "hitPoints": hit_points,
        "armorClass": armor_class,
        "avatarUrl": avatar_url,
    }
    payload.update(overrides)
    return payload


def make_character_list_entry(
    character_id: int | str = 1001,
    name: str = "Tordek",
    level: int = 5,
    race: str = "Hill Dwarf",
    classes: tuple[str, ...] = ("Cleric",),
) -> dict[str, Any]:
    """One entry of /api/user/characters `data`."""
    return {
        "id": character_id,
        "name": name,
        "level": level,
        "race": {"fullName": race},
        "classes": [{"definition": {"name": c}} for c in classes],
    }


def make_digital_content(*items: tuple[str, str, str]) -> dict[str, Any]:
    """/api/subscriptions/user/digital-content body from (id, name, type) tuples."""
    return {"items": [{"id": i, "name": n, "type": t} for i, n, t in items]}


Route = dict[str, tuple[int, Any]]


class ProviderStub:
    """httpx.MockTransport handler mapping paths to (status, json) responses.

    Records every request so tests can assert on headers and call counts.
    """

    def __init__(self, routes: Route | None = None) -> None:
        self.routes: Route = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get(request.url.path, (404, {"message": "not found"}))
        return httpx.Response(status, json=body)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


def make_client(
    routes: Route | None = None,
    *,
    handler: Callable[[httpx.Request], httpx.Response] | None = None,
) -> tuple[DnDBeyondClient, ProviderStub]:
    """DnDBeyondClient wired to a ProviderStub (or a custom handler)."""
    stub = ProviderStub(routes)
    client = DnDBeyondClient(
        base_url=TEST_BASE_URL,
        transport=httpx.MockTransport(handler or stub),
    )
    return client, stub


class RecordingHandler(ContentHandler):
    """Handler that records calls and fails for ids in `fail_ids`."""

    def __init__(
        self,
        kind: str,
        *,
        fail_ids: dict[str, Exception] | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self._kind = kind
        self.fail_ids = fail_ids or {}
        self.gate = gate
        self.calls: list[tuple[str, bool]] = []
        self.started = asyncio.Event()
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def kind(self) -> str:
        return self._kind

    async def import_content(self, content_id: str, overwrite: bool) -> None:
        self.calls.append((content_id, overwrite))
        self.started.set()
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if content_id in self.fail_ids:
                raise self.fail_ids[content_id]
        finally:
            self.in_flight -= 1
