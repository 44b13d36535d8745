"""Imports module for bulk contact import from CSV."""

from jobdock.imports.conflict_detectors import (
    DuplicateDetector,
    EmailDuplicateDetector,
    get_duplicate_detector,
)
from jobdock.imports.exceptions import (
    AlreadyProcessingError,
    AlreadyResolvedError,
    ConflictNotFoundError,
    CSVParseError,
    ImportEngineError,
    ImportNotFoundError,
    SessionNotFoundError,
)
from jobdock.imports.parsers import (
    DEFAULT_FIELD_ALIASES,
    build_alias_table,
    infer_mapping,
    normalize_row,
    parse_csv_rows,
    parse_preview,
    parse_tags,
)
from jobdock.imports.schemas import (
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
from jobdock.imports.service import ImportService, get_import_service
from jobdock.imports.sessions import InMemorySessionStore, SessionStore, get_session_store

__all__ = [
    # Engine
    "ImportService",
    "get_import_service",
    "SessionStore",
    "InMemorySessionStore",
    "get_session_store",
    # Parsing and mapping
    "DEFAULT_FIELD_ALIASES",
    "build_alias_table",
    "infer_mapping",
    "normalize_row",
    "parse_csv_rows",
    "parse_preview",
    "parse_tags",
    # Duplicate detection
    "DuplicateDetector",
    "EmailDuplicateDetector",
    "get_duplicate_detector",
    # Schemas
    "ConflictResolution",
    "ConflictStatus",
    "CSVPreview",
    "ImportConflict",
    "ImportProgress",
    "ImportRowError",
    "ImportSession",
    "ImportSessionStatus",
    "ImportStatus",
    # Errors
    "ImportEngineError",
    "ImportNotFoundError",
    "SessionNotFoundError",
    "ConflictNotFoundError",
    "AlreadyProcessingError",
    "AlreadyResolvedError",
    "CSVParseError",
]
