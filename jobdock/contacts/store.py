"""Contact store used by the import engine.

The import engine never talks to the database directly. It consumes the
narrow ``ContactStore`` capability below, scoped by tenant id, so any keyed
store (SQL table, remote API, test double) can back it.
"""

import logging
from typing import Any, Protocol

from sqlalchemy.orm import Session

from jobdock.contacts.schemas import CONTACT_FIELDS, Contact, ContactCreate
from jobdock.db.models import Contact as ContactModel

logger = logging.getLogger(__name__)


class ContactStore(Protocol):
    """Read/write capability over a tenant's contacts."""

    def find_by_email(self, tenant_id: str, email: str) -> Contact | None:
        """Return the tenant's contact with this exact email, if any."""
        ...

    def insert(self, tenant_id: str, record: ContactCreate) -> Contact:
        """Create a contact for the tenant and return it."""
        ...

    def update(self, contact_id: str, changes: dict[str, Any]) -> Contact:
        """Apply changes to an existing contact and return it."""
        ...


class SqlContactStore:
    """ContactStore backed by the ``contacts`` table."""

    def __init__(self, db: Session):
        """Initialize contact store.

        Args:
            db: Database session.
        """
        self.db = db

    def find_by_email(self, tenant_id: str, email: str) -> Contact | None:
        """Find a contact by tenant and email.

        Args:
            tenant_id: Tenant ID.
            email: Email address (exact match).

        Returns:
            Contact | None: The first matching contact.
        """
        contact = (
            self.db.query(ContactModel)
            .filter(ContactModel.tenant_id == tenant_id, ContactModel.email == email)
            .order_by(ContactModel.created_at)
            .first()
        )
        if contact is None:
            return None
        return Contact.model_validate(contact)

    def insert(self, tenant_id: str, record: ContactCreate) -> Contact:
        """Insert a new contact.

        Args:
            tenant_id: Tenant ID.
            record: Validated contact data.

        Returns:
            Contact: The stored contact.
        """
        contact = ContactModel(tenant_id=tenant_id, **record.model_dump())
        self.db.add(contact)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(contact)
        return Contact.model_validate(contact)

    def update(self, contact_id: str, changes: dict[str, Any]) -> Contact:
        """Update an existing contact.

        Keys that are not contact columns are ignored.

        Args:
            contact_id: Contact ID.
            changes: Field values to write.

        Returns:
            Contact: The updated contact.

        Raises:
            ValueError: If the contact does not exist.
        """
        contact = self.db.query(ContactModel).filter(ContactModel.id == contact_id).first()
        if contact is None:
            raise ValueError(f"Contact {contact_id} not found")

        for field, value in changes.items():
            if field in CONTACT_FIELDS:
                setattr(contact, field, value)

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(contact)
        logger.debug(f"Updated contact {contact_id}: {sorted(changes)}")
        return Contact.model_validate(contact)
