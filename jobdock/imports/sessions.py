"""Import session storage.

Sessions live for the lifetime of the process. The engine only sees the
``SessionStore`` protocol, so a shared store (Redis, database) can replace
the in-memory one when the service runs on more than one process.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol

from jobdock.imports.exceptions import AlreadyProcessingError, SessionNotFoundError
from jobdock.imports.schemas import ImportSession, ImportStatus

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Keyed registry of import sessions."""

    def add(self, session: ImportSession) -> None: ...

    def get(self, session_id: str) -> ImportSession | None: ...

    def remove(self, session_id: str) -> None: ...

    def list_sessions(self) -> list[ImportSession]: ...

    def begin_processing(self, session_id: str) -> ImportSession:
        """Atomically move a session from ``pending`` to ``processing``.

        Raises:
            SessionNotFoundError: If the session does not exist.
            AlreadyProcessingError: If the session is not ``pending``.
        """
        ...

    def lock(self, session_id: str) -> AbstractContextManager[ImportSession]:
        """Context manager holding the session's lock.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        ...


class InMemorySessionStore:
    """Process-local SessionStore.

    A registry lock guards the dict. Each session gets its own re-entrant
    lock, held for every status change and counter update.
    """

    def __init__(self):
        self._sessions: dict[str, ImportSession] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def add(self, session: ImportSession) -> None:
        with self._registry_lock:
            self._sessions[session.id] = session
            self._locks[session.id] = threading.RLock()

    def get(self, session_id: str) -> ImportSession | None:
        with self._registry_lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> None:
        with self._registry_lock:
            self._sessions.pop(session_id, None)
            self._locks.pop(session_id, None)

    def list_sessions(self) -> list[ImportSession]:
        with self._registry_lock:
            return list(self._sessions.values())

    def begin_processing(self, session_id: str) -> ImportSession:
        """Atomically move a session from ``pending`` to ``processing``.

        Args:
            session_id: Session ID.

        Returns:
            ImportSession: The session, now ``processing``.

        Raises:
            SessionNotFoundError: If the session does not exist.
            AlreadyProcessingError: If a pass is running or has already run.
        """
        with self.lock(session_id) as session:
            if session.status == ImportStatus.PROCESSING:
                raise AlreadyProcessingError("Import session is already being processed")
            if session.status != ImportStatus.PENDING:
                raise AlreadyProcessingError(
                    f"Import session has already been processed (status: {session.status.value})"
                )
            session.status = ImportStatus.PROCESSING
            session.touch()
        return session

    @contextmanager
    def lock(self, session_id: str) -> Iterator[ImportSession]:
        """Hold the session's lock for the duration of the block.

        Args:
            session_id: Session ID.

        Yields:
            ImportSession: The locked session.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        with self._registry_lock:
            session = self._sessions.get(session_id)
            session_lock = self._locks.get(session_id)
        if session is None or session_lock is None:
            raise SessionNotFoundError(session_id)

        with session_lock:
            yield session

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._sessions)


_default_store: InMemorySessionStore | None = None
_default_store_lock = threading.Lock()


def get_session_store() -> InMemorySessionStore:
    """Get the process-wide session store.

    Returns:
        InMemorySessionStore: Shared store instance.
    """
    global _default_store
    with _default_store_lock:
        if _default_store is None:
            _default_store = InMemorySessionStore()
            logger.info("Created in-memory import session store")
        return _default_store
