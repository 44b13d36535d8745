"""Pydantic schemas for contacts."""

from datetime import datetime

from pydantic import BaseModel, Field

# Columns an import (or an update merge) is allowed to write.
CONTACT_FIELDS = [
    "first_name",
    "last_name",
    "email",
    "phone",
    "company",
    "job_title",
    "address",
    "city",
    "state",
    "zip_code",
    "country",
    "tags",
    "notes",
    "status",
]


class ContactCreate(BaseModel):
    """Schema for creating a contact."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    company: str | None = Field(None, max_length=255)
    job_title: str | None = Field(None, max_length=255)
    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    country: str | None = Field("USA", max_length=100)
    tags: list[str] = Field(default_factory=list)
    notes: str | None = None
    status: str = Field("active", max_length=20)


class Contact(BaseModel):
    """Schema for a stored contact."""

    id: str
    tenant_id: str
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    company: str | None = None
    job_title: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    tags: list[str] = Field(default_factory=list)
    notes: str | None = None
    status: str = "active"
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
