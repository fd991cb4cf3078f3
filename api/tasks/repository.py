"""
Task persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core.db import Database
from core.errors import InternalError
from core.pagination import Pagination, fetch_page
from core.sql import FilterBuilder, insert_statement, update_statement

_SELECT = """
    SELECT t.*, c.company_name, su.first_name || ' ' || su.last_name AS assigned_to_name
    FROM task t
    LEFT JOIN company c ON c.company_id = t.company_id
    LEFT JOIN staff_user su ON su.staff_id = t.assigned_to
"""


async def list_tasks(db: Database, filters: FilterBuilder, pagination: Pagination) -> tuple[list[dict], int]:
    return await fetch_page(
        db,
        select_sql=_SELECT + """
        {where}
        ORDER BY t.due_date ASC NULLS LAST, t.task_id ASC
        """,
        count_sql="""
        SELECT count(*)
        FROM task t
        {where}
        """,
        filters=filters,
        pagination=pagination,
    )


async def get_task(db: Database, task_id: int) -> dict | None:
    return await db.fetch_one(_SELECT + " WHERE t.task_id = $1", task_id)


async def create_task(db: Database, values: dict[str, Any], *, created_by: int) -> dict:
    sql, params = insert_statement("task", {**values, "created_by": created_by})
    row = await db.fetch_one(sql, *params)
    if row is None:
        raise InternalError("Failed to create task")
    return row


async def update_task(db: Database, task_id: int, values: dict[str, Any]) -> dict | None:
    sql, params = update_statement("task", "task_id", task_id, values)
    return await db.fetch_one(sql, *params)


async def delete_task(db: Database, task_id: int) -> bool:
    row = await db.fetch_one("DELETE FROM task WHERE task_id = $1 RETURNING task_id", task_id)
    return row is not None
