"""Periodic sweep of finished import sessions."""

import logging
from typing import Any

from jobdock.db.database import SessionLocal
from jobdock.imports.service import get_import_service
from jobdock.imports.sessions import SessionStore

logger = logging.getLogger(__name__)


def sweep_import_sessions(session_store: SessionStore | None = None) -> dict[str, Any]:
    """Remove completed or failed import sessions past the retention window.

    This function is called by the cron endpoint. Sessions still waiting for
    conflict resolution are never removed.

    Args:
        session_store: Session registry to sweep (defaults to the
            process-wide store).

    Returns:
        dict: Number of sessions removed.
    """
    db = SessionLocal()
    try:
        service = get_import_service(db, session_store)
        removed = service.cleanup()
    finally:
        db.close()

    logger.info(f"Import session sweep removed {removed} sessions")
    return {"sessions_removed": removed}
