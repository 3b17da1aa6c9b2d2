"""Pydantic schemas for the settings and session API."""

from typing import Any

from pydantic import BaseModel, Field


class SettingResponse(BaseModel):
    key: str
    name: str
    hint: str
    type: str
    value: Any
    default: Any
    config: bool
    secret: bool
    is_set: bool


class PatchSettingsRequest(BaseModel):
    values: dict[str, Any] = Field(default_factory=dict)


class SessionResponse(BaseModel):
    authenticated: bool
    profile: dict[str, Any] | None = None


class ValidateSessionRequest(BaseModel):
    """Validate `credential`, or the stored cookie when omitted."""

    credential: str | None = None
