"""Duplicate detection for contact import.

A row conflicts with existing data when its natural key matches a contact
the tenant already has. Email is the only natural key that survives
arbitrary CSV sources, so rows without an email are never checked and are
always inserted as new contacts.

Example usage:
    detector = get_duplicate_detector(store)
    existing = detector.find_duplicate(tenant_id, "jane@example.com")
"""

from typing import Protocol

from jobdock.contacts.schemas import Contact
from jobdock.contacts.store import ContactStore


class DuplicateDetector(Protocol):
    """Protocol for duplicate detection strategies."""

    def find_duplicate(self, tenant_id: str, email: str | None) -> Contact | None:
        """Return the existing contact an incoming record collides with.

        Args:
            tenant_id: Tenant the import is scoped to.
            email: Email of the incoming record.

        Returns:
            Contact | None: The existing contact, or None for a new record.
        """
        ...


class EmailDuplicateDetector:
    """Detects duplicates by exact ``(tenant_id, email)`` match.

    This is a point-in-time read, not a uniqueness guarantee: two imports
    running at once can both see "no match" and insert the same email.
    """

    def __init__(self, store: ContactStore):
        """Initialize detector.

        Args:
            store: Contact store to look up existing contacts in.
        """
        self.store = store

    def find_duplicate(self, tenant_id: str, email: str | None) -> Contact | None:
        """Look up an existing contact with the same email."""
        if not email or not email.strip():
            return None
        return self.store.find_by_email(tenant_id, email.strip())


def get_duplicate_detector(store: ContactStore) -> DuplicateDetector:
    """Factory function to create the duplicate detector.

    Args:
        store: Contact store backing the lookups.

    Returns:
        DuplicateDetector: Detector used by the import engine.
    """
    return EmailDuplicateDetector(store)
