"""
Policy business logic.
"""

from __future__ import annotations

import logging

import asyncpg

from core.db import Database
from core.errors import BadRequest, NotFound, constraint_error
from core.sql import FilterBuilder

from . import repository, schemas

logger = logging.getLogger(__name__)


def account_filters(*, company_id: int | None = None, status: str | None = None) -> FilterBuilder:
    return FilterBuilder().add_if(company_id, "pa.company_id").add_if(status, "pa.status")


def policy_filters(
    *,
    search: str | None = None,
    status: str | None = None,
    policy_type: str | None = None,
    account_id: int | None = None,
    company_id: int | None = None,
) -> FilterBuilder:
    return (
        FilterBuilder()
        .contains(search, "p.policy_number", "p.carrier")
        .add_if(status, "p.status")
        .add_if(policy_type, "p.policy_type")
        .add_if(account_id, "p.account_id")
        .add_if(company_id, "pa.company_id")
    )


async def create_account(db: Database, payload: schemas.PolicyAccountCreate) -> dict:
    try:
        row = await repository.create_account(db, payload.model_dump(exclude_none=True))
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Policy account") from exc
    logger.info("policy_account_created account_id=%s company_id=%s", row["account_id"], row["company_id"])
    return row


async def get_policy(db: Database, policy_id: int) -> dict:
    row = await repository.get_policy(db, policy_id)
    if row is None:
        raise NotFound("Policy not found")
    return row


async def create_policy(db: Database, payload: schemas.PolicyCreate) -> dict:
    try:
        row = await repository.create_policy(db, payload.model_dump(exclude_none=True))
    except asyncpg.UniqueViolationError as exc:
        raise BadRequest("Policy number already exists") from exc
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Policy") from exc
    logger.info("policy_created policy_id=%s policy_number=%s", row["policy_id"], row["policy_number"])
    return row


async def update_policy(db: Database, policy_id: int, payload: schemas.PolicyUpdate) -> dict:
    try:
        row = await repository.update_policy(db, policy_id, payload.model_dump(exclude_unset=True))
    except asyncpg.UniqueViolationError as exc:
        raise BadRequest("Policy number already exists") from exc
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Policy") from exc
    if row is None:
        raise NotFound("Policy not found")
    return row


async def delete_policy(db: Database, policy_id: int) -> None:
    try:
        deleted = await repository.delete_policy(db, policy_id)
    except asyncpg.ForeignKeyViolationError as exc:
        raise BadRequest("Policy has claims and cannot be deleted") from exc
    if not deleted:
        raise NotFound("Policy not found")
    logger.info("policy_deleted policy_id=%s", policy_id)
