"""Errors raised by the contact import engine.

These are caller mistakes and are always raised synchronously. Problems with
individual rows are never raised; they become ``ImportRowError`` records on
the session.
"""


class ImportEngineError(Exception):
    """Base class for import engine errors."""


class ImportNotFoundError(ImportEngineError, LookupError):
    """A session or conflict ID does not exist."""


class SessionNotFoundError(ImportNotFoundError):
    def __init__(self, session_id: str):
        super().__init__("Import session not found")
        self.session_id = session_id


class ConflictNotFoundError(ImportNotFoundError):
    def __init__(self, conflict_id: str):
        super().__init__("Conflict not found")
        self.conflict_id = conflict_id


class AlreadyProcessingError(ImportEngineError):
    """The session's processing pass is running or has already run."""


class AlreadyResolvedError(ImportEngineError):
    def __init__(self, conflict_id: str):
        super().__init__("Conflict already resolved")
        self.conflict_id = conflict_id


class CSVParseError(ImportEngineError, ValueError):
    """The CSV text is malformed."""
