"""Contact import API routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, status

from jobdock.config import get_settings
from jobdock.dependencies import CurrentTenantId, ImportServiceDep, get_import_session_store
from jobdock.imports.exceptions import (
    AlreadyProcessingError,
    AlreadyResolvedError,
    CSVParseError,
    ImportEngineError,
    ImportNotFoundError,
)
from jobdock.imports.schemas import (
    BulkResolveResult,
    CSVPreview,
    ImportInitRequest,
    ImportInitResponse,
    ImportPreviewRequest,
    ImportSessionStatus,
    ResolveConflictRequest,
)
from jobdock.imports.service import ImportService
from jobdock.imports.sessions import SessionStore
from jobdock.scheduler.import_cleanup import sweep_import_sessions

router = APIRouter()

logger = logging.getLogger(__name__)


def _http_error(error: ImportEngineError) -> HTTPException:
    """Convert an import engine error to an HTTP error."""
    if isinstance(error, ImportNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (AlreadyProcessingError, AlreadyResolvedError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, CSVParseError):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(error))


def _check_session_tenant(service: ImportService, session_id: str, tenant_id: str) -> None:
    """Make sure the session exists and belongs to the tenant.

    Sessions of other tenants are reported as not found.

    Raises:
        HTTPException: If the session is missing or belongs to another tenant.
    """
    session = service.get_session(session_id)
    if session is None or session.tenant_id != tenant_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Import session not found",
        )


@router.post("/preview", response_model=CSVPreview)
def preview_import(
    data: ImportPreviewRequest,
    service: ImportServiceDep,
    tenant_id: CurrentTenantId,
) -> CSVPreview:
    """Preview a CSV file and suggest a field mapping.

    Args:
        data: CSV text.
        service: Import service.
        tenant_id: Current tenant ID.

    Returns:
        CSVPreview: Headers, first rows, row count and suggested mapping.

    Raises:
        HTTPException: If the CSV is malformed.
    """
    try:
        return service.parse_preview(data.csv_content)
    except CSVParseError as e:
        raise _http_error(e)


@router.post("/sessions", response_model=ImportInitResponse, status_code=status.HTTP_201_CREATED)
def create_import_session(
    data: ImportInitRequest,
    service: ImportServiceDep,
    tenant_id: CurrentTenantId,
) -> ImportInitResponse:
    """Create an import session with a confirmed field mapping.

    Args:
        data: File name, CSV text and field mapping.
        service: Import service.
        tenant_id: Current tenant ID.

    Returns:
        ImportInitResponse: Session ID and row count.

    Raises:
        HTTPException: If the CSV is malformed.
    """
    try:
        session = service.create_session(
            tenant_id, data.file_name, data.csv_content, data.field_mapping
        )
    except CSVParseError as e:
        raise _http_error(e)

    return ImportInitResponse(session_id=session.id, total_rows=session.total_rows)


@router.post("/sessions/{session_id}/process", response_model=ImportSessionStatus)
def process_import_session(
    session_id: str,
    service: ImportServiceDep,
    tenant_id: CurrentTenantId,
) -> ImportSessionStatus:
    """Import every row of a pending session.

    Rows with a duplicate email are queued as conflicts; rows that fail are
    reported in ``errors``.

    Raises:
        HTTPException: If the session is missing or already processed.
    """
    _check_session_tenant(service, session_id, tenant_id)
    try:
        return service.process_session(session_id)
    except ImportEngineError as e:
        raise _http_error(e)


@router.get("/sessions/{session_id}", response_model=ImportSessionStatus)
def get_import_status(
    session_id: str,
    service: ImportServiceDep,
    tenant_id: CurrentTenantId,
) -> ImportSessionStatus:
    """Get progress, pending conflicts and errors of a session.

    Raises:
        HTTPException: If the session is not found.
    """
    _check_session_tenant(service, session_id, tenant_id)
    try:
        return service.get_session_status(session_id)
    except ImportEngineError as e:
        raise _http_error(e)


@router.post(
    "/sessions/{session_id}/conflicts/{conflict_id}/resolve",
    response_model=ImportSessionStatus,
)
def resolve_import_conflict(
    session_id: str,
    conflict_id: str,
    data: ResolveConflictRequest,
    service: ImportServiceDep,
    tenant_id: CurrentTenantId,
) -> ImportSessionStatus:
    """Update the existing contact from a duplicate row, or skip the row.

    Raises:
        HTTPException: If the session/conflict is missing or already resolved.
    """
    _check_session_tenant(service, session_id, tenant_id)
    try:
        return service.resolve_conflict(session_id, conflict_id, data.resolution)
    except ImportEngineError as e:
        raise _http_error(e)


@router.post("/sessions/{session_id}/conflicts/resolve-all", response_model=BulkResolveResult)
def resolve_all_import_conflicts(
    session_id: str,
    data: ResolveConflictRequest,
    service: ImportServiceDep,
    tenant_id: CurrentTenantId,
) -> BulkResolveResult:
    """Apply one resolution to every pending conflict of a session.

    Conflicts are resolved one by one in file order. The loop stops at the
    first failure; conflicts resolved before it stay resolved.

    Raises:
        HTTPException: If the session is not found.
    """
    _check_session_tenant(service, session_id, tenant_id)
    try:
        pending = service.get_session_status(session_id).pending_conflicts
    except ImportEngineError as e:
        raise _http_error(e)

    resolved_count = 0
    failed_conflict_id = None
    error = None

    for conflict in pending:
        try:
            service.resolve_conflict(session_id, conflict.id, data.resolution)
        except Exception as e:
            logger.warning(
                f"Bulk resolution of import session {session_id} stopped at "
                f"conflict {conflict.id}: {e}"
            )
            failed_conflict_id = conflict.id
            error = str(e) or "Unknown error"
            break
        resolved_count += 1

    return BulkResolveResult(
        resolved_count=resolved_count,
        failed_conflict_id=failed_conflict_id,
        error=error,
        session=service.get_session_status(session_id),
    )


@router.post("/cleanup")
def cleanup_import_sessions(
    session_store: Annotated[SessionStore, Depends(get_import_session_store)],
    x_cron_secret: Annotated[str | None, Header()] = None,
):
    """Sweep finished import sessions (for cron jobs).

    Args:
        session_store: Session registry to sweep.
        x_cron_secret: Secret key for authentication.

    Returns:
        dict: Number of sessions removed.

    Raises:
        HTTPException: If secret key is invalid.
    """
    expected_secret = get_settings().cron_secret_key
    if expected_secret and x_cron_secret != expected_secret:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid cron secret",
        )

    return sweep_import_sessions(session_store)
