"""ddbimporter FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from ddbimporter.config import AppConfig, configure_logging, set_debug_logging
from ddbimporter.db.connection import Database
from ddbimporter.host.sqlite import SqliteHostGateway
from ddbimporter.importer.handlers import build_handlers
from ddbimporter.importer.queue import ImportQueueProcessor
from ddbimporter.importer.registry import HandlerRegistry
from ddbimporter.importer.router import get_import_service
from ddbimporter.importer.router import router as import_router
from ddbimporter.importer.service import ImportService
from ddbimporter.models import Notification
from ddbimporter.notifications import NotificationCenter
from ddbimporter.provider import AuthError, ContentLister, DnDBeyondClient, SessionValidator
from ddbimporter.settings.router import get_session_validator, get_settings_store
from ddbimporter.settings.router import router as settings_router
from ddbimporter.settings.store import SettingsStore

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def get_notification_center() -> NotificationCenter:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("NotificationCenter not initialized")


def register_setting_listeners(
    settings: SettingsStore, validator: SessionValidator, config: AppConfig
) -> None:
    """Cookie changes re-validate; debugMode switches log verbosity."""

    async def on_cookie_changed(value: str) -> None:
        if not value:
            validator.clear()
            return
        try:
            await validator.validate(value)
        except AuthError:
            logger.info("New Cobalt cookie did not validate")

    def on_import_path_changed(value: str) -> None:
        logger.info("Import path changed to: %s", value)

    def on_debug_changed(value: bool) -> None:
        set_debug_logging(value, config.log_level)

    settings.on_change("cobaltCookie", on_cookie_changed)
    settings.on_change("importPath", on_import_path_changed)
    settings.on_change("debugMode", on_debug_changed)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage database lifecycle and service wiring."""
    config = AppConfig.from_env()
    configure_logging(config.log_level)

    db = await Database.connect(config.db_path)
    notifier = NotificationCenter()
    settings = SettingsStore(db)
    set_debug_logging(await settings.get("debugMode"), config.log_level)

    client = DnDBeyondClient(
        base_url=config.base_url,
        user_agent=config.user_agent,
        timeout=config.timeout,
    )
    validator = SessionValidator(client, notifier)
    register_setting_listeners(settings, validator, config)

    gateway = SqliteHostGateway(db)
    registry = HandlerRegistry(build_handlers(client, gateway, settings))
    processor = ImportQueueProcessor(registry, settings=settings, notifier=notifier)
    import_svc = ImportService(validator, ContentLister(client), processor, notifier)

    app.dependency_overrides[get_settings_store] = lambda: settings
    app.dependency_overrides[get_session_validator] = lambda: validator
    app.dependency_overrides[get_import_service] = lambda: import_svc
    app.dependency_overrides[get_notification_center] = lambda: notifier

    await validator.initialize(settings)
    logger.info("ddbimporter ready")

    app.state.db = db
    yield

    await import_svc.shutdown()
    await client.close()
    await db.close()


app = FastAPI(
    title="ddbimporter",
    description="Import owned D&D Beyond content and characters into a virtual tabletop",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=AppConfig.from_env().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(settings_router)
app.include_router(import_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": VERSION}


@app.get("/api/notifications")
async def notifications(
    limit: int | None = Query(None, ge=0),
    notifier: NotificationCenter = Depends(get_notification_center),
) -> list[Notification]:
    return notifier.recent(limit)
