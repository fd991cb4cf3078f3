"""
Contact business logic.
"""

from __future__ import annotations

import logging

import asyncpg

from core.db import Database
from core.errors import NotFound, constraint_error
from core.sql import FilterBuilder

from . import repository, schemas

logger = logging.getLogger(__name__)


def contact_filters(*, search: str | None = None, company_id: int | None = None) -> FilterBuilder:
    return (
        FilterBuilder()
        .contains(search, "ct.first_name", "ct.last_name", "ct.email")
        .add_if(company_id, "ct.company_id")
    )


async def get_contact(db: Database, contact_id: int) -> dict:
    row = await repository.get_contact(db, contact_id)
    if row is None:
        raise NotFound("Contact not found")
    return row


async def create_contact(db: Database, payload: schemas.ContactCreate) -> dict:
    try:
        row = await repository.create_contact(db, payload.model_dump(exclude_none=True))
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Contact") from exc
    logger.info("contact_created contact_id=%s company_id=%s", row["contact_id"], row["company_id"])
    return row


async def update_contact(db: Database, contact_id: int, payload: schemas.ContactUpdate) -> dict:
    try:
        row = await repository.update_contact(db, contact_id, payload.model_dump(exclude_unset=True))
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Contact") from exc
    if row is None:
        raise NotFound("Contact not found")
    return row


async def delete_contact(db: Database, contact_id: int) -> None:
    if not await repository.delete_contact(db, contact_id):
        raise NotFound("Contact not found")
    logger.info("contact_deleted contact_id=%s", contact_id)
