"""
Contact persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core.db import Database
from core.errors import InternalError
from core.pagination import Pagination, fetch_page
from core.sql import FilterBuilder, insert_statement, update_statement


async def list_contacts(db: Database, filters: FilterBuilder, pagination: Pagination) -> tuple[list[dict], int]:
    return await fetch_page(
        db,
        select_sql="""
        SELECT ct.*, c.company_name
        FROM contact ct
        JOIN company c ON c.company_id = ct.company_id
        {where}
        ORDER BY ct.last_name ASC, ct.first_name ASC, ct.contact_id ASC
        """,
        count_sql="""
        SELECT count(*)
        FROM contact ct
        {where}
        """,
        filters=filters,
        pagination=pagination,
    )


async def get_contact(db: Database, contact_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT ct.*, c.company_name
        FROM contact ct
        JOIN company c ON c.company_id = ct.company_id
        WHERE ct.contact_id = $1
        """,
        contact_id,
    )


async def create_contact(db: Database, values: dict[str, Any]) -> dict:
    sql, params = insert_statement("contact", values)
    row = await db.fetch_one(sql, *params)
    if row is None:
        raise InternalError("Failed to create contact")
    return row


async def update_contact(db: Database, contact_id: int, values: dict[str, Any]) -> dict | None:
    sql, params = update_statement("contact", "contact_id", contact_id, values)
    return await db.fetch_one(sql, *params)


async def delete_contact(db: Database, contact_id: int) -> bool:
    row = await db.fetch_one("DELETE FROM contact WHERE contact_id = $1 RETURNING contact_id", contact_id)
    return row is not None
