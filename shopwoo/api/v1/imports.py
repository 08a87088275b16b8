"""
Import API endpoints
Start imports, poll their progress and logs, resume and reap sessions
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from shopwoo.api.dependencies import get_import_scheduler, get_progress_reporter
from shopwoo.core.exceptions import (
    ConcurrentStartError,
    SessionNotFoundError,
    ShopWooException,
    StoreNotFoundError,
    UpserterNotConfiguredError,
    ValidationError,
)
from shopwoo.core.logging import get_logger
from shopwoo.domains.importer.models import ImportLogPage, ProgressReport, StartResult
from shopwoo.domains.importer.services import ImportScheduler, ProgressReporter
from shopwoo.shared.constants.importer import IMPORT_LOG_PAGE_LIMIT

logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/imports", tags=["imports"])


class StartImportRequest(BaseModel):
    store_id: str = Field(..., min_length=1, description="Source store id")
    resource_type: str = Field(..., description="products, customers or orders")
    options: Dict[str, Any] = Field(
        default_factory=dict, description="Import filters"
    )


class ResumeResponse(BaseModel):
    session_id: str
    resumed: bool


class ReapRequest(BaseModel):
    store_id: Optional[str] = None
    resource_type: Optional[str] = None


class ReapResponse(BaseModel):
    reaped: List[str]
    count: int


def to_http_error(error: ShopWooException) -> HTTPException:
    """Map service exceptions onto HTTP status codes"""
    if isinstance(error, (SessionNotFoundError, StoreNotFoundError)):
        status_code = 404
    elif isinstance(error, ValidationError):
        status_code = 422
    elif isinstance(error, ConcurrentStartError):
        status_code = 409
    elif isinstance(error, UpserterNotConfiguredError):
        status_code = 503
    else:
        status_code = 500
    return HTTPException(status_code=status_code, detail=error.to_dict())


@router.post("/start", response_model=StartResult)
async def start_import(
    request: StartImportRequest,
    scheduler: ImportScheduler = Depends(get_import_scheduler),
):
    """
    Start an import for a store and resource type.

    If an import is already running for the pair, its session id is returned
    with `created=false`.
    """
    try:
        return await scheduler.start_import(
            request.store_id, request.resource_type, request.options
        )
    except ShopWooException as e:
        logger.warning(
            "Start import rejected",
            store_id=request.store_id,
            resource_type=request.resource_type,
            error=str(e),
        )
        raise to_http_error(e)


@router.get("/active", response_model=Optional[ProgressReport])
async def get_active_import(
    store_id: str,
    resource_type: str,
    reporter: ProgressReporter = Depends(get_progress_reporter),
):
    """Progress of the running import for the pair, or null"""
    return await reporter.get_active_progress(store_id, resource_type)


@router.get("/{session_id}/progress", response_model=ProgressReport)
async def get_import_progress(
    session_id: str,
    reporter: ProgressReporter = Depends(get_progress_reporter),
):
    try:
        return await reporter.get_progress(session_id)
    except SessionNotFoundError as e:
        raise to_http_error(e)


@router.get("/{session_id}/logs", response_model=ImportLogPage)
async def get_import_logs(
    session_id: str,
    level: Optional[str] = None,
    limit: int = IMPORT_LOG_PAGE_LIMIT,
    offset: int = 0,
    reporter: ProgressReporter = Depends(get_progress_reporter),
):
    """Per-batch log of an import session, oldest first"""
    try:
        return await reporter.get_logs(session_id, level=level, limit=limit, offset=offset)
    except ShopWooException as e:
        raise to_http_error(e)


@router.post("/{session_id}/resume", response_model=ResumeResponse)
async def resume_import(
    session_id: str,
    scheduler: ImportScheduler = Depends(get_import_scheduler),
):
    """Re-enqueue the next batch of a running import"""
    try:
        resumed = await scheduler.resume_import(session_id)
    except ShopWooException as e:
        raise to_http_error(e)
    return ResumeResponse(session_id=session_id, resumed=resumed)


@router.post("/reap", response_model=ReapResponse)
async def reap_stuck_imports(
    request: Optional[ReapRequest] = None,
    scheduler: ImportScheduler = Depends(get_import_scheduler),
):
    """Fail imports that have stopped making progress"""
    request = request or ReapRequest()
    reaped = await scheduler.reap_stuck_sessions(
        request.store_id, request.resource_type
    )
    return ReapResponse(reaped=reaped, count=len(reaped))
