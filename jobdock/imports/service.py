"""Contact import engine.

Drives one CSV file from upload to full resolution:

1. ``create_session`` stores the file and the confirmed field mapping.
2. ``process_session`` walks every row once: rows missing a name become
   errors, rows whose email already exists become conflicts, everything else
   is inserted. One bad row never stops the rest of the file.
3. ``resolve_conflict`` applies a human decision (update or skip) to one
   conflict at a time until none are left.
"""

import logging
import uuid
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta

from pydantic import ValidationError
from sqlalchemy.orm import Session

from jobdock.config import get_settings
from jobdock.contacts.schemas import CONTACT_FIELDS, ContactCreate
from jobdock.contacts.store import ContactStore, SqlContactStore
from jobdock.imports.conflict_detectors import DuplicateDetector, get_duplicate_detector
from jobdock.imports.exceptions import AlreadyResolvedError, ConflictNotFoundError
from jobdock.imports.parsers import (
    build_alias_table,
    normalize_row,
    parse_csv_rows,
    parse_preview,
)
from jobdock.imports.schemas import (
    TERMINAL_STATUSES,
    ConflictResolution,
    ConflictStatus,
    CSVPreview,
    ImportConflict,
    ImportProgress,
    ImportRowError,
    ImportSession,
    ImportSessionStatus,
    ImportStatus,
)
from jobdock.imports.sessions import SessionStore, get_session_store

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name")

# Applied to inserted contacts when the file doesn't provide them
INSERT_DEFAULTS = {
    "country": "USA",
    "status": "active",
}


class ImportService:
    """Service class for contact import sessions."""

    def __init__(
        self,
        contact_store: ContactStore,
        session_store: SessionStore,
        detector: DuplicateDetector | None = None,
        field_aliases: Mapping[str, Sequence[str]] | None = None,
        retention: timedelta = timedelta(days=7),
    ):
        """Initialize import service.

        Args:
            contact_store: Store contacts are read from and written to.
            session_store: Registry that owns the import sessions.
            detector: Duplicate detector (defaults to email matching).
            field_aliases: Alias table used to suggest field mappings.
            retention: Default age after which finished sessions are swept.
        """
        self.contact_store = contact_store
        self.session_store = session_store
        self.detector = detector or get_duplicate_detector(contact_store)
        self.field_aliases = field_aliases if field_aliases is not None else build_alias_table()
        self.retention = retention

    # --- Queries ---

    def parse_preview(self, csv_content: str) -> CSVPreview:
        """Parse CSV text and suggest a field mapping.

        Raises:
            CSVParseError: If the CSV is malformed.
        """
        return parse_preview(csv_content, self.field_aliases)

    def get_session(self, session_id: str) -> ImportSession | None:
        """Get an import session by ID, or None if it doesn't exist."""
        return self.session_store.get(session_id)

    def get_session_status(self, session_id: str) -> ImportSessionStatus:
        """Get progress, pending conflicts and errors of a session.

        Args:
            session_id: Session ID.

        Returns:
            ImportSessionStatus: Snapshot of the session.

        Raises:
            SessionNotFoundError: If the session doesn't exist.
        """
        with self.session_store.lock(session_id) as session:
            return ImportSessionStatus(
                session_id=session.id,
                status=session.status,
                progress=ImportProgress(
                    total=session.total_rows,
                    processed=session.processed_rows,
                    inserted=session.inserted_count,
                    updated=session.updated_count,
                    skipped=session.skipped_count,
                    failed=session.failed_count,
                ),
                pending_conflicts=[c.model_copy(deep=True) for c in session.pending_conflicts],
                errors=list(session.errors),
            )

    # --- Commands ---

    def create_session(
        self,
        tenant_id: str,
        file_name: str,
        csv_content: str,
        field_mapping: Mapping[str, str],
    ) -> ImportSession:
        """Create a pending import session for a CSV file.

        The file is parsed once to count its rows; the raw text is kept for
        the processing pass.

        Args:
            tenant_id: Tenant the import belongs to.
            file_name: Original file name.
            csv_content: Raw CSV text.
            field_mapping: Confirmed map of CSV header -> contact field.

        Returns:
            ImportSession: The new session.

        Raises:
            CSVParseError: If the CSV is malformed.
        """
        _, rows = parse_csv_rows(csv_content)

        session = ImportSession(
            id=f"import_{uuid.uuid4().hex}",
            tenant_id=tenant_id,
            file_name=file_name,
            csv_content=csv_content,
            field_mapping=dict(field_mapping),
            total_rows=len(rows),
        )
        self.session_store.add(session)

        logger.info(
            f"Created import session {session.id} for tenant {tenant_id}: "
            f"{file_name} ({session.total_rows} rows)"
        )
        return session

    def process_session(self, session_id: str) -> ImportSessionStatus:
        """Run the processing pass over every row of a pending session.

        Args:
            session_id: Session ID.

        Returns:
            ImportSessionStatus: Session status after the pass.

        Raises:
            SessionNotFoundError: If the session doesn't exist.
            AlreadyProcessingError: If the session is not pending.
            CSVParseError: If the stored file can no longer be parsed.
        """
        session = self.session_store.begin_processing(session_id)
        logger.info(f"Processing import session {session_id} ({session.total_rows} rows)")

        try:
            _, rows = parse_csv_rows(session.csv_content)
            for index, row in enumerate(rows):
                self._process_row(session, index, row)
        except Exception:
            logger.exception(f"Import session {session_id} failed")
            with self.session_store.lock(session_id):
                session.status = ImportStatus.FAILED
                session.touch()
            raise

        with self.session_store.lock(session_id):
            if session.pending_conflicts:
                session.status = ImportStatus.AWAITING_CONFLICTS
            else:
                self._mark_completed(session)

        logger.info(
            f"Import session {session_id} processed: {session.inserted_count} inserted, "
            f"{len(session.pending_conflicts)} conflicts, {session.failed_count} failed"
        )
        return self.get_session_status(session_id)

    def resolve_conflict(
        self,
        session_id: str,
        conflict_id: str,
        resolution: ConflictResolution | str,
    ) -> ImportSessionStatus:
        """Apply a resolution to one pending conflict.

        ``update`` merges the incoming non-null fields into the existing
        contact; ``skip`` leaves it untouched. A failing contact update is
        raised to the caller and the conflict stays pending.

        Args:
            session_id: Session ID.
            conflict_id: Conflict ID.
            resolution: "update" or "skip".

        Returns:
            ImportSessionStatus: Session status after the resolution.

        Raises:
            SessionNotFoundError: If the session doesn't exist.
            ConflictNotFoundError: If the conflict doesn't exist.
            AlreadyResolvedError: If the conflict was already resolved.
        """
        resolution = ConflictResolution(resolution)

        with self.session_store.lock(session_id) as session:
            conflict = next((c for c in session.conflicts if c.id == conflict_id), None)
            if conflict is None:
                raise ConflictNotFoundError(conflict_id)
            if conflict.status == ConflictStatus.RESOLVED:
                raise AlreadyResolvedError(conflict_id)

            if resolution == ConflictResolution.UPDATE:
                changes = {k: v for k, v in conflict.incoming_data.items() if v is not None}
                self.contact_store.update(conflict.existing_contact.id, changes)
                session.updated_count += 1
            else:
                session.skipped_count += 1

            conflict.status = ConflictStatus.RESOLVED
            conflict.resolution = resolution
            conflict.resolved_at = datetime.now(UTC)
            session.touch()

            if (
                session.status == ImportStatus.AWAITING_CONFLICTS
                and not session.pending_conflicts
                and session.processed_rows == session.total_rows
            ):
                self._mark_completed(session)

        logger.info(
            f"Resolved conflict {conflict_id} in import session {session_id}: {resolution.value}"
        )
        return self.get_session_status(session_id)

    def cleanup(self, max_age: timedelta | None = None) -> int:
        """Remove finished sessions older than ``max_age``.

        Sessions that are pending, processing or awaiting conflicts are kept
        regardless of age.

        Args:
            max_age: Minimum age of a swept session (defaults to the
                configured retention).

        Returns:
            int: Number of sessions removed.
        """
        max_age = self.retention if max_age is None else max_age
        cutoff = datetime.now(UTC) - max_age
        removed = 0

        for session in self.session_store.list_sessions():
            if session.status in TERMINAL_STATUSES and session.created_at < cutoff:
                self.session_store.remove(session.id)
                removed += 1

        if removed:
            logger.info(f"Removed {removed} finished import sessions")
        return removed

    # --- Internals ---

    def _process_row(self, session: ImportSession, index: int, row: dict) -> None:
        """Import one row, recording the outcome on the session."""
        record = normalize_row(row, session.field_mapping)
        for field in REQUIRED_FIELDS:
            if isinstance(record.get(field), str):
                record[field] = record[field].strip()

        missing = [field for field in REQUIRED_FIELDS if not record.get(field)]
        if missing:
            self._record_error(
                session,
                ImportRowError(
                    row_index=index,
                    field=missing[0] if len(missing) == 1 else None,
                    message=f"Missing required fields: {', '.join(missing)}",
                    data=row,
                ),
            )
            return

        try:
            existing = self.detector.find_duplicate(session.tenant_id, record.get("email"))
            if existing is not None:
                conflict = ImportConflict(
                    id=f"conflict_{uuid.uuid4().hex}",
                    session_id=session.id,
                    row_index=index,
                    existing_contact=existing,
                    incoming_data=record,
                )
                with self.session_store.lock(session.id):
                    session.conflicts.append(conflict)
                    session.processed_rows += 1
                    session.touch()
                return

            payload = {field: record[field] for field in CONTACT_FIELDS if field in record}
            for field, default in INSERT_DEFAULTS.items():
                payload.setdefault(field, default)
            payload.setdefault("tags", [])

            self.contact_store.insert(session.tenant_id, ContactCreate(**payload))
        except ValidationError as e:
            errors = e.errors()
            self._record_error(
                session,
                ImportRowError(
                    row_index=index,
                    field=str(errors[0]["loc"][0]) if len(errors) == 1 else None,
                    message="; ".join(f"{err['loc'][0]}: {err['msg']}" for err in errors),
                    data=row,
                ),
            )
            return
        except Exception as e:
            logger.warning(f"Import session {session.id}: row {index} failed: {e}")
            self._record_error(
                session,
                ImportRowError(row_index=index, message=str(e) or "Unknown error", data=row),
            )
            return

        with self.session_store.lock(session.id):
            session.inserted_count += 1
            session.processed_rows += 1
            session.touch()

    def _record_error(self, session: ImportSession, error: ImportRowError) -> None:
        with self.session_store.lock(session.id):
            session.errors.append(error)
            session.failed_count += 1
            session.processed_rows += 1
            session.touch()

    def _mark_completed(self, session: ImportSession) -> None:
        session.status = ImportStatus.COMPLETED
        session.completed_at = datetime.now(UTC)
        session.touch()


def get_import_service(db: Session, session_store: SessionStore | None = None) -> ImportService:
    """Create an import service backed by the contacts table.

    Args:
        db: Database session.
        session_store: Session registry (defaults to the process-wide store).

    Returns:
        ImportService instance.
    """
    settings = get_settings()
    return ImportService(
        contact_store=SqlContactStore(db),
        session_store=session_store if session_store is not None else get_session_store(),
        field_aliases=build_alias_table(settings.import_field_aliases),
        retention=timedelta(days=settings.import_session_retention_days),
    )
