"""Pydantic schemas for the content and import API."""

from pydantic import BaseModel, Field

from ddbimporter.importer.queue import ProcessResult, ProgressEvent
from ddbimporter.models import ContentKind


class SelectionItem(BaseModel):
    id: str
    kind: ContentKind


class ImportRequest(BaseModel):
    selections: list[SelectionItem]
    overwrite: bool = False


class ImportStatusResponse(BaseModel):
    running: bool
    result: ProcessResult | None = None
    progress: ProgressEvent | None = None
    log: list[str] = Field(default_factory=list)


class CancelResponse(BaseModel):
    cancelled: bool
