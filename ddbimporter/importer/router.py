"""Content listing and import API routes."""

from fastapi import APIRouter, Depends, HTTPException, status

from ddbimporter.importer.queue import AlreadyRunningError, ContentSelection, EmptySelectionError
from ddbimporter.importer.registry import UnknownContentKindError
from ddbimporter.importer.schemas import (
    CancelResponse,
    ImportRequest,
    ImportStatusResponse,
)
from ddbimporter.importer.service import ImportService
from ddbimporter.models import ContentReference, ContentSet
from ddbimporter.provider.client import AuthError, FetchError

router = APIRouter(prefix="/api", tags=["import"])


def get_import_service() -> ImportService:
    """Dependency placeholder, overridden at startup."""
    raise RuntimeError("ImportService not configured")


@router.get("/content")
async def list_content(
    service: ImportService = Depends(get_import_service),
) -> ContentSet:
    try:
        return await service.open_import()
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    except FetchError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e


@router.get("/content/characters")
async def list_characters(
    service: ImportService = Depends(get_import_service),
) -> list[ContentReference]:
    try:
        return await service.fetch_characters()
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    except FetchError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e


@router.post("/import", status_code=status.HTTP_202_ACCEPTED)
async def start_import(
    request: ImportRequest,
    service: ImportService = Depends(get_import_service),
) -> ImportStatusResponse:
    """Queue the selection and start draining it in the background."""
    selections = [ContentSelection(s.id, s.kind) for s in request.selections]
    try:
        service.submit(selections, request.overwrite)
    except (EmptySelectionError, UnknownContentKindError) as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except AlreadyRunningError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return _status(service)


@router.post("/import/cancel")
async def cancel_import(
    service: ImportService = Depends(get_import_service),
) -> CancelResponse:
    return CancelResponse(cancelled=service.cancel())


@router.get("/import/status")
async def import_status(
    service: ImportService = Depends(get_import_service),
) -> ImportStatusResponse:
    return _status(service)


def _status(service: ImportService) -> ImportStatusResponse:
    return ImportStatusResponse(
        running=service.is_running,
        result=service.status(),
        progress=service.tracker.latest,
        log=service.tracker.log,
    )
