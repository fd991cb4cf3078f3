"""
Task API endpoints.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from auth.dependencies import ADMIN, MANAGER, get_current_user, get_user_db, require_roles
from core.db import Database
from core.pagination import Pagination, pagination_params
from core.responses import format_paginated_response, format_response

from . import repository, schemas, service

router = APIRouter(prefix="/tasks", dependencies=[Depends(get_current_user)])

TaskId = Annotated[int, Path(ge=1)]


@router.get("")
async def list_tasks(
    search: str | None = Query(default=None, max_length=200),
    status_filter: schemas.TaskStatus | None = Query(default=None, alias="status"),
    priority: schemas.TaskPriority | None = None,
    assigned_to: int | None = Query(default=None, ge=1),
    company_id: int | None = Query(default=None, ge=1),
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_user_db),
) -> dict:
    filters = service.task_filters(
        search=search,
        status=status_filter,
        priority=priority,
        assigned_to=assigned_to,
        company_id=company_id,
    )
    rows, total = await repository.list_tasks(db, filters, pagination)
    return format_paginated_response(rows, pagination, total)


@router.get("/{task_id}")
async def get_task(task_id: TaskId, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.get_task(db, task_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: schemas.TaskCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_user_db),
) -> dict:
    return format_response(await service.create_task(db, current_user, payload), "Task created successfully")


@router.put("/{task_id}")
async def update_task(payload: schemas.TaskUpdate, task_id: TaskId, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.update_task(db, task_id, payload), "Task updated successfully")


@router.delete("/{task_id}", dependencies=[Depends(require_roles(ADMIN, MANAGER))])
async def delete_task(task_id: TaskId, db: Database = Depends(get_user_db)) -> dict:
    await service.delete_task(db, task_id)
    return format_response(None, "Task deleted successfully")
