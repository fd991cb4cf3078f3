"""
Claim business logic.
"""

from __future__ import annotations

import logging

import asyncpg

from core.db import Database
from core.errors import BadRequest, NotFound, constraint_error
from core.sql import FilterBuilder

from . import repository, schemas

logger = logging.getLogger(__name__)


def claim_filters(*, search: str | None = None, status: str | None = None, policy_id: int | None = None) -> FilterBuilder:
    return (
        FilterBuilder()
        .contains(search, "cl.claim_number", "cl.description")
        .add_if(status, "cl.status")
        .add_if(policy_id, "cl.policy_id")
    )


async def get_claim(db: Database, claim_id: int) -> dict:
    row = await repository.get_claim(db, claim_id)
    if row is None:
        raise NotFound("Claim not found")
    return row


async def create_claim(db: Database, payload: schemas.ClaimCreate) -> dict:
    try:
        row = await repository.create_claim(db, payload.model_dump(exclude_none=True))
    except asyncpg.UniqueViolationError as exc:
        raise BadRequest("Claim number already exists") from exc
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Claim") from exc
    logger.info("claim_created claim_id=%s claim_number=%s", row["claim_id"], row["claim_number"])
    return row


async def update_claim(db: Database, claim_id: int, payload: schemas.ClaimUpdate) -> dict:
    try:
        row = await repository.update_claim(db, claim_id, payload.model_dump(exclude_unset=True))
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Claim") from exc
    if row is None:
        raise NotFound("Claim not found")
    return row


async def delete_claim(db: Database, claim_id: int) -> None:
    if not await repository.delete_claim(db, claim_id):
        raise NotFound("Claim not found")
    logger.info("claim_deleted claim_id=%s", claim_id)
