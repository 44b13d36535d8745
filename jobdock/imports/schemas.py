"""Pydantic schemas for the contact import engine."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from jobdock.contacts.schemas import Contact


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ImportStatus(str, Enum):
    """Lifecycle of an import session.

    ``awaiting_conflicts`` means the processing pass has finished and one or
    more duplicate rows still wait for a human decision.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    AWAITING_CONFLICTS = "awaiting_conflicts"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({ImportStatus.COMPLETED, ImportStatus.FAILED})


class ConflictStatus(str, Enum):
    """Status of a duplicate-row conflict."""

    PENDING = "pending"
    RESOLVED = "resolved"


class ConflictResolution(str, Enum):
    """What to do with a row whose email matches an existing contact."""

    UPDATE = "update"  # Merge incoming fields into the existing contact
    SKIP = "skip"  # Leave the existing contact untouched


class ImportRowError(BaseModel):
    """A row that could not be imported.

    Attributes:
        row_index: Zero-based index of the data row in the file.
        field: Offending field, when a single field is to blame.
        message: Human-readable description.
        data: The raw row as parsed from the file.
    """

    model_config = ConfigDict(frozen=True)

    row_index: int
    field: Optional[str] = None
    message: str
    data: dict[str, Any] = Field(default_factory=dict)


class ImportConflict(BaseModel):
    """A row whose email matches a contact that already exists.

    Attributes:
        id: Conflict ID.
        session_id: Owning import session.
        row_index: Zero-based index of the data row in the file.
        existing_contact: Snapshot of the stored contact at detection time.
        incoming_data: Normalized partial record built from the row.
        status: Pending until a resolution has been applied.
        resolution: The applied resolution, set exactly once.
        created_at: When the conflict was detected.
        resolved_at: When the resolution was applied.
    """

    id: str
    session_id: str
    row_index: int
    existing_contact: Contact
    incoming_data: dict[str, Any] = Field(default_factory=dict)
    status: ConflictStatus = ConflictStatus.PENDING
    resolution: Optional[ConflictResolution] = None
    created_at: datetime = Field(default_factory=_utcnow)
    resolved_at: Optional[datetime] = None


class ImportSession(BaseModel):
    """One uploaded CSV file, from upload until every row is accounted for.

    Invariant: ``processed_rows`` equals inserted + updated + skipped +
    failed + conflicts still pending, and never exceeds ``total_rows``.

    Attributes:
        id: Session ID.
        tenant_id: Tenant every lookup and write is scoped to.
        file_name: Original file name.
        csv_content: Raw CSV text, kept so the file can be re-read.
        field_mapping: Confirmed map of CSV header -> contact field.
        total_rows: Number of data rows in the file.
        processed_rows: Rows visited by the processing pass.
        inserted_count: New contacts created.
        updated_count: Existing contacts updated from a conflict.
        skipped_count: Conflicts resolved by skipping.
        failed_count: Rows rejected with an error.
        status: Current lifecycle status.
        conflicts: Duplicate rows, in file order.
        errors: Rejected rows, in file order.
        created_at: Creation timestamp.
        updated_at: Last mutation timestamp.
        completed_at: When the session reached ``completed``.
    """

    id: str
    tenant_id: str
    file_name: str
    csv_content: str
    field_mapping: dict[str, str] = Field(default_factory=dict)
    total_rows: int = 0
    processed_rows: int = 0
    inserted_count: int = 0
    updated_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    status: ImportStatus = ImportStatus.PENDING
    conflicts: list[ImportConflict] = Field(default_factory=list)
    errors: list[ImportRowError] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None

    @property
    def pending_conflicts(self) -> list[ImportConflict]:
        """Conflicts still waiting for a resolution."""
        return [c for c in self.conflicts if c.status == ConflictStatus.PENDING]

    def touch(self) -> None:
        self.updated_at = _utcnow()


class CSVPreview(BaseModel):
    """Preview of an uploaded CSV, used to confirm the field mapping.

    Attributes:
        headers: Trimmed column headers.
        rows: First few parsed rows (header -> value).
        total_rows: Number of data rows in the file.
        suggested_mapping: Inferred header -> contact field mapping.
    """

    headers: list[str] = Field(default_factory=list)
    rows: list[dict[str, str]] = Field(default_factory=list)
    total_rows: int = 0
    suggested_mapping: dict[str, str] = Field(default_factory=dict)


class ImportProgress(BaseModel):
    """Progress counters of an import session."""

    total: int = 0
    processed: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0


class ImportSessionStatus(BaseModel):
    """Read-only projection of an import session for polling clients."""

    session_id: str
    status: ImportStatus
    progress: ImportProgress
    pending_conflicts: list[ImportConflict] = Field(default_factory=list)
    errors: list[ImportRowError] = Field(default_factory=list)


# --- Request/response bodies for the HTTP layer ---


class ImportPreviewRequest(BaseModel):
    """Request body for a CSV preview."""

    csv_content: str


class ImportInitRequest(BaseModel):
    """Request body for creating an import session."""

    file_name: str = Field(..., min_length=1, max_length=255)
    csv_content: str
    field_mapping: dict[str, str] = Field(default_factory=dict)


class ImportInitResponse(BaseModel):
    """Response for a newly created import session."""

    session_id: str
    total_rows: int


class ResolveConflictRequest(BaseModel):
    """Request body for resolving one or all conflicts."""

    resolution: ConflictResolution


class BulkResolveResult(BaseModel):
    """Outcome of applying one resolution to every pending conflict.

    Attributes:
        resolved_count: Conflicts resolved before stopping.
        failed_conflict_id: Conflict whose resolution failed, if any.
        error: Error message of the failed resolution, if any.
        session: Session status after the loop.
    """

    resolved_count: int = 0
    failed_conflict_id: Optional[str] = None
    error: Optional[str] = None
    session: ImportSessionStatus
