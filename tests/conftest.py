"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator
from uuid import uuid4

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["DEBUG"] = "false"
os.environ["CRON_SECRET_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from jobdock.contacts.schemas import Contact, ContactCreate
from jobdock.contacts.store import SqlContactStore
from jobdock.db.models import Base
from jobdock.imports.service import ImportService
from jobdock.imports.sessions import InMemorySessionStore

# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def tenant_id() -> str:
    """Tenant the tests import into."""
    return str(uuid4())


@pytest.fixture
def other_tenant_id() -> str:
    """A second, unrelated tenant."""
    return str(uuid4())


@pytest.fixture
def session_store() -> InMemorySessionStore:
    """Create an empty session store for each test."""
    return InMemorySessionStore()


@pytest.fixture
def contact_store(db: Session) -> SqlContactStore:
    """Create a contact store over the test database."""
    return SqlContactStore(db)


@pytest.fixture
def import_service(
    contact_store: SqlContactStore, session_store: InMemorySessionStore
) -> ImportService:
    """Create an import service with the default alias table."""
    return ImportService(contact_store=contact_store, session_store=session_store)


@pytest.fixture
def existing_contact(contact_store: SqlContactStore, tenant_id: str) -> Contact:
    """Create a contact that imports can collide with."""
    return contact_store.insert(
        tenant_id,
        ContactCreate(
            first_name="Janet",
            last_name="Dough",
            email="jane@x.com",
            phone="555-0000",
            company="Old Co",
            tags=["existing"],
        ),
    )


@pytest.fixture
def client(
    db: Session, session_store: InMemorySessionStore
) -> Generator[TestClient, None, None]:
    """Create a test client with database and session store overrides."""
    # Import here to ensure env vars are set
    from jobdock.dependencies import get_db, get_import_session_store
    from jobdock.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_import_session_store] = lambda: session_store
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def tenant_headers(tenant_id: str) -> dict[str, str]:
    """Headers identifying the test tenant."""
    return {"X-Tenant-ID": tenant_id}
