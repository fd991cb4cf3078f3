"""
Claim persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core.db import Database
from core.errors import InternalError
from core.pagination import Pagination, fetch_page
from core.sql import FilterBuilder, insert_statement, update_statement

_SELECT = """
    SELECT cl.*, p.policy_number, su.first_name || ' ' || su.last_name AS adjuster_name
    FROM claim cl
    JOIN policy p ON p.policy_id = cl.policy_id
    LEFT JOIN staff_user su ON su.staff_id = cl.assigned_adjuster
"""


async def list_claims(db: Database, filters: FilterBuilder, pagination: Pagination) -> tuple[list[dict], int]:
    return await fetch_page(
        db,
        select_sql=_SELECT + """
        {where}
        ORDER BY cl.incident_date DESC, cl.claim_id DESC
        """,
        count_sql="""
        SELECT count(*)
        FROM claim cl
        {where}
        """,
        filters=filters,
        pagination=pagination,
    )


async def get_claim(db: Database, claim_id: int) -> dict | None:
    return await db.fetch_one(_SELECT + " WHERE cl.claim_id = $1", claim_id)


async def create_claim(db: Database, values: dict[str, Any]) -> dict:
    sql, params = insert_statement("claim", values)
    row = await db.fetch_one(sql, *params)
    if row is None:
        raise InternalError("Failed to create claim")
    return row


async def update_claim(db: Database, claim_id: int, values: dict[str, Any]) -> dict | None:
    sql, params = update_statement("claim", "claim_id", claim_id, values)
    return await db.fetch_one(sql, *params)


async def delete_claim(db: Database, claim_id: int) -> bool:
    row = await db.fetch_one("DELETE FROM claim WHERE claim_id = $1 RETURNING claim_id", claim_id)
    return row is not None
