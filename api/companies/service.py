"""
Company business logic.

Writes that touch more than one table (company + change event, profile
versioning) run in a single transaction.
"""

from __future__ import annotations

import logging

import asyncpg

from core.db import Database
from core.errors import BadRequest, NotFound, constraint_error
from core.pagination import Pagination
from core.sql import FilterBuilder

from . import repository, schemas

logger = logging.getLogger(__name__)


def company_filters(
    *,
    search: str | None = None,
    industry: str | None = None,
    size: str | None = None,
    status: str | None = None,
) -> FilterBuilder:
    return (
        FilterBuilder()
        .contains(search, "c.company_name", "c.legal_name", "c.tax_id")
        .contains(industry, "c.primary_industry")
        .add_if(size, "c.company_size")
        .add_if(status, "c.status")
    )


async def _require_company(db: Database, company_id: int) -> None:
    if not await repository.company_exists(db, company_id):
        raise NotFound("Company not found")


async def list_companies(db: Database, filters: FilterBuilder, pagination: Pagination) -> tuple[list[dict], int]:
    return await repository.list_companies(db, filters, pagination)


async def get_company(db: Database, company_id: int) -> dict:
    row = await repository.get_company(db, company_id)
    if row is None:
        raise NotFound("Company not found")
    return row


async def create_company(db: Database, current_user: dict, payload: schemas.CompanyCreate) -> dict:
    values = payload.model_dump(exclude_none=True)
    user_id = int(current_user["staff_id"])
    try:
        async with db.transaction() as tx:
            row = await repository.create_company(tx, values, created_by=user_id)
            await repository.insert_change_event(
                tx,
                int(row["company_id"]),
                event_type="company_created",
                description=f"Company created: {row['company_name']}",
                changed_fields=values,
                changed_by=user_id,
            )
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Company") from exc

    logger.info("company_created company_id=%s by=%s", row["company_id"], current_user.get("username"))
    return row


async def update_company(db: Database, current_user: dict, company_id: int, payload: schemas.CompanyUpdate) -> dict:
    values = payload.model_dump(exclude_unset=True)
    if "company_name" in values and values["company_name"] is None:
        raise BadRequest("Company name cannot be empty")

    user_id = int(current_user["staff_id"])
    try:
        async with db.transaction() as tx:
            row = await repository.update_company(tx, company_id, values)
            if row is None:
                raise NotFound("Company not found")
            if values:
                await repository.insert_change_event(
                    tx,
                    company_id,
                    event_type="company_updated",
                    description=f"Company updated: {', '.join(sorted(values))}",
                    changed_fields=values,
                    changed_by=user_id,
                )
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Company") from exc

    logger.info("company_updated company_id=%s by=%s", company_id, current_user.get("username"))
    return row


async def delete_company(db: Database, current_user: dict, company_id: int) -> None:
    try:
        deleted = await repository.delete_company(db, company_id)
    except asyncpg.ForeignKeyViolationError as exc:
        raise BadRequest("Company has policy accounts and cannot be deleted") from exc
    if not deleted:
        raise NotFound("Company not found")
    logger.info("company_deleted company_id=%s by=%s", company_id, current_user.get("username"))


async def get_business_profile(db: Database, company_id: int) -> dict:
    await _require_company(db, company_id)
    row = await repository.get_current_profile(db, company_id)
    if row is None:
        raise NotFound("Business profile not found")
    return row


async def update_business_profile(
    db: Database,
    current_user: dict,
    company_id: int,
    payload: schemas.BusinessProfileUpdate,
) -> dict:
    """
    Store a new profile version. Fields missing from the payload carry over
    from the current version; exactly one row stays current.
    """
    changes = payload.model_dump(exclude_unset=True)
    user_id = int(current_user["staff_id"])

    try:
        async with db.transaction() as tx:
            # Taken before reading the profile: concurrent writers see each other's versions.
            if not await repository.lock_company(tx, company_id):
                raise NotFound("Company not found")
            current = await repository.get_current_profile(tx, company_id)
            values = {field: (current or {}).get(field) for field in repository.PROFILE_FIELDS}
            values.update(changes)
            version = await repository.next_profile_version(tx, company_id)

            row = await repository.insert_current_profile(tx, company_id, values, version=version)
            await repository.insert_change_event(
                tx,
                company_id,
                event_type="profile_updated",
                description=f"Business profile updated to version {version}",
                changed_fields=changes,
                changed_by=user_id,
            )
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Business profile") from exc

    logger.info("business_profile_updated company_id=%s version=%s", company_id, version)
    return row


async def list_risk_factors(db: Database, company_id: int) -> list[dict]:
    await _require_company(db, company_id)
    return await repository.list_risk_factors(db, company_id)


async def add_risk_factor(db: Database, current_user: dict, company_id: int, payload: schemas.RiskFactorCreate) -> dict:
    values = payload.model_dump(exclude_none=True)
    user_id = int(current_user["staff_id"])

    async with db.transaction() as tx:
        await _require_company(tx, company_id)
        row = await repository.insert_risk_factor(tx, company_id, values, identified_by=user_id)
        await repository.insert_change_event(
            tx,
            company_id,
            event_type="risk_factor_added",
            description=f"Risk factor added: {values['risk_category']}",
            changed_fields=values,
            changed_by=user_id,
        )

    logger.info("risk_factor_added company_id=%s category=%s", company_id, values["risk_category"])
    return row


async def list_change_events(db: Database, company_id: int, pagination: Pagination) -> tuple[list[dict], int]:
    await _require_company(db, company_id)
    return await repository.list_change_events(db, company_id, pagination)
