"""FastAPI routes for module settings and the provider session."""

from fastapi import APIRouter, Depends, HTTPException

from ddbimporter.provider.auth import SessionValidator
from ddbimporter.provider.client import AuthError
from ddbimporter.settings.schemas import (
    PatchSettingsRequest,
    SessionResponse,
    SettingResponse,
    ValidateSessionRequest,
)
from ddbimporter.settings.store import (
    SETTINGS,
    InvalidSettingError,
    SettingsStore,
    UnknownSettingError,
)

router = APIRouter(prefix="/api", tags=["settings"])

_MASK = "********"


def get_settings_store() -> SettingsStore:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("SettingsStore not initialized")


def get_session_validator() -> SessionValidator:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("SessionValidator not initialized")


@router.get("/settings")
async def list_settings(
    store: SettingsStore = Depends(get_settings_store),
) -> list[SettingResponse]:
    return await _describe(store)


@router.patch("/settings")
async def update_settings(
    request: PatchSettingsRequest,
    store: SettingsStore = Depends(get_settings_store),
) -> list[SettingResponse]:
    # check every key first so a bad request changes nothing
    for key, value in request.values.items():
        definition = SETTINGS.get(key)
        if definition is None:
            raise HTTPException(status_code=400, detail=f"Unknown setting: {key}")
        if type(value) is not definition.type:
            raise HTTPException(
                status_code=400,
                detail=f"Setting {key} expects {definition.type.__name__}",
            )
    try:
        for key, value in request.values.items():
            await store.set(key, value)
    except (UnknownSettingError, InvalidSettingError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return await _describe(store)


@router.get("/session")
async def get_session(
    validator: SessionValidator = Depends(get_session_validator),
) -> SessionResponse:
    session = validator.session
    return SessionResponse(authenticated=session.authenticated, profile=session.profile)


@router.post("/session/validate")
async def validate_session(
    request: ValidateSessionRequest,
    validator: SessionValidator = Depends(get_session_validator),
    store: SettingsStore = Depends(get_settings_store),
) -> SessionResponse:
    credential = request.credential
    if credential is None:
        credential = await store.get("cobaltCookie")
    try:
        session = await validator.validate(credential)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    return SessionResponse(authenticated=session.authenticated, profile=session.profile)


async def _describe(store: SettingsStore) -> list[SettingResponse]:
    described = []
    for key, definition in SETTINGS.items():
        value = await store.get(key)
        is_set = value != definition.default
        described.append(SettingResponse(
            key=key,
            name=definition.name,
            hint=definition.hint,
            type=definition.type.__name__,
            value=_MASK if definition.secret and value else value,
            default=definition.default,
            config=definition.config,
            secret=definition.secret,
            is_set=is_set,
        ))
    return described
