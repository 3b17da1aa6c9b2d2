"""Shared pytest fixtures for ddbimporter tests."""

from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from ddbimporter.config import AppConfig
from ddbimporter.db.connection import Database
from ddbimporter.host.sqlite import SqliteHostGateway
from ddbimporter.importer.handlers import build_handlers
from ddbimporter.importer.queue import ImportQueueProcessor, RunGuard
from ddbimporter.importer.registry import HandlerRegistry
from ddbimporter.importer.router import get_import_service
from ddbimporter.importer.service import ImportService
from ddbimporter.main import app, get_notification_center, register_setting_listeners
from ddbimporter.notifications import NotificationCenter
from ddbimporter.provider.auth import SessionValidator
from ddbimporter.provider.client import DIGITAL_CONTENT_PATH, USER_CHARACTERS_PATH
from ddbimporter.provider.content import ContentLister
from ddbimporter.settings.router import get_session_validator, get_settings_store
from ddbimporter.settings.store import SettingsStore
from tests.fixtures import make_character_list_entry, make_client, make_digital_content


@pytest.fixture
async def db():
    """In-memory database for tests."""
    database = await Database.connect(":memory:")
    yield database
    await database.close()


@pytest.fixture
async def settings(db):
    """SettingsStore backed by in-memory database."""
    return SettingsStore(db)


@pytest.fixture
async def gateway(db):
    """SqliteHostGateway backed by in-memory database."""
    return SqliteHostGateway(db)


@pytest.fixture
def notifier():
    return NotificationCenter()


@pytest.fixture
def guard():
    """A private run guard so tests never share the process-wide flag."""
    return RunGuard()


@pytest.fixture
async def api():
    """Async test client against the app. Tests override dependencies."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def provider():
    """DnDBeyondClient on a ProviderStub with a valid profile and some content."""
    client, stub = make_client({
        USER_CHARACTERS_PATH: (200, {"data": [make_character_list_entry("C1", "Lidda")]}),
        DIGITAL_CONTENT_PATH: (200, make_digital_content(("A1", "Lost Mine", "adventure"))),
    })
    yield client, stub
    await client.close()


@pytest.fixture
async def wired(api, provider, db, settings, gateway, notifier, guard):
    """The app's dependencies wired to test doubles, the way lifespan wires them."""
    client, stub = provider
    validator = SessionValidator(client, notifier)
    register_setting_listeners(settings, validator, AppConfig())
    registry = HandlerRegistry(build_handlers(client, gateway, settings))
    processor = ImportQueueProcessor(registry, settings=settings, notifier=notifier, guard=guard)
    service = ImportService(validator, ContentLister(client), processor, notifier)

    app.dependency_overrides[get_settings_store] = lambda: settings
    app.dependency_overrides[get_session_validator] = lambda: validator
    app.dependency_overrides[get_import_service] = lambda: service
    app.dependency_overrides[get_notification_center] = lambda: notifier

    yield SimpleNamespace(
        api=api, client=client, stub=stub, settings=settings, validator=validator,
        service=service, gateway=gateway, notifier=notifier,
    )
    await service.shutdown()
