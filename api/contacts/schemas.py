"""
Contact request schemas.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from auth.schemas import EMAIL_PATTERN


class ContactBase(BaseModel):
    email: str | None = Field(default=None, max_length=320, pattern=EMAIL_PATTERN)
    phone: str | None = Field(default=None, max_length=50)
    job_title: str | None = Field(default=None, max_length=100)
    is_primary: bool | None = None


class ContactCreate(ContactBase):
    company_id: int = Field(..., ge=1)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class ContactUpdate(ContactBase):
    company_id: int | None = Field(default=None, ge=1)
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
