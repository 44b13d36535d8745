"""Dependency injection for FastAPI."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from jobdock.db.database import SessionLocal
from jobdock.imports.service import ImportService, get_import_service
from jobdock.imports.sessions import SessionStore, get_session_store


def get_db() -> Generator[Session, None, None]:
    """Get database session.

    Yields:
        Session: SQLAlchemy session.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_tenant_id(
    x_tenant_id: Annotated[str | None, Header()] = None,
) -> str:
    """Get the tenant ID the caller acts for.

    Authentication and tenant resolution happen upstream; this only reads
    the resolved tenant from the request.

    Args:
        x_tenant_id: Value of the X-Tenant-ID header.

    Returns:
        str: Tenant ID.

    Raises:
        HTTPException: If the header is missing or blank.
    """
    if not x_tenant_id or not x_tenant_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing X-Tenant-ID header",
        )
    return x_tenant_id.strip()


def get_import_session_store() -> SessionStore:
    """Get the session store shared by all requests."""
    return get_session_store()


def get_contact_import_service(
    db: Annotated[Session, Depends(get_db)],
    session_store: Annotated[SessionStore, Depends(get_import_session_store)],
) -> ImportService:
    """Get an import service bound to the request's database session."""
    return get_import_service(db, session_store)


# Type aliases for cleaner dependency injection
CurrentTenantId = Annotated[str, Depends(get_tenant_id)]
ImportServiceDep = Annotated[ImportService, Depends(get_contact_import_service)]
