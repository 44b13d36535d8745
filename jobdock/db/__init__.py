"""Database module."""

from jobdock.db.database import SessionLocal, engine, init_db
from jobdock.db.models import Base, Contact

__all__ = [
    "SessionLocal",
    "engine",
    "init_db",
    "Base",
    "Contact",
]
