"""
Task business logic.
"""

from __future__ import annotations

import logging

import asyncpg

from core.db import Database
from core.errors import NotFound, constraint_error
from core.sql import FilterBuilder

from . import repository, schemas

logger = logging.getLogger(__name__)


def task_filters(
    *,
    search: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    assigned_to: int | None = None,
    company_id: int | None = None,
) -> FilterBuilder:
    return (
        FilterBuilder()
        .contains(search, "t.title")
        .add_if(status, "t.status")
        .add_if(priority, "t.priority")
        .add_if(assigned_to, "t.assigned_to")
        .add_if(company_id, "t.company_id")
    )


async def get_task(db: Database, task_id: int) -> dict:
    row = await repository.get_task(db, task_id)
    if row is None:
        raise NotFound("Task not found")
    return row


async def create_task(db: Database, current_user: dict, payload: schemas.TaskCreate) -> dict:
    try:
        row = await repository.create_task(
            db,
            payload.model_dump(exclude_none=True),
            created_by=int(current_user["staff_id"]),
        )
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Task") from exc
    logger.info("task_created task_id=%s by=%s", row["task_id"], current_user.get("username"))
    return row


async def update_task(db: Database, task_id: int, payload: schemas.TaskUpdate) -> dict:
    try:
        row = await repository.update_task(db, task_id, payload.model_dump(exclude_unset=True))
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="Task") from exc
    if row is None:
        raise NotFound("Task not found")
    return row


async def delete_task(db: Database, task_id: int) -> None:
    if not await repository.delete_task(db, task_id):
        raise NotFound("Task not found")
    logger.info("task_deleted task_id=%s", task_id)
