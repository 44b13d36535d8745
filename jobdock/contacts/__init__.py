"""Contacts module."""

from jobdock.contacts.schemas import CONTACT_FIELDS, Contact, ContactCreate
from jobdock.contacts.store import ContactStore, SqlContactStore

__all__ = [
    "CONTACT_FIELDS",
    "Contact",
    "ContactCreate",
    "ContactStore",
    "SqlContactStore",
]
