"""
Policy and policy-account persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core.db import Database
from core.errors import InternalError
from core.pagination import Pagination, fetch_page
from core.sql import FilterBuilder, insert_statement, update_statement


async def list_accounts(db: Database, filters: FilterBuilder, pagination: Pagination) -> tuple[list[dict], int]:
    return await fetch_page(
        db,
        select_sql="""
        SELECT pa.*, c.company_name
        FROM policy_account pa
        JOIN company c ON c.company_id = pa.company_id
        {where}
        ORDER BY pa.created_at DESC, pa.account_id DESC
        """,
        count_sql="""
        SELECT count(*)
        FROM policy_account pa
        {where}
        """,
        filters=filters,
        pagination=pagination,
    )


async def create_account(db: Database, values: dict[str, Any]) -> dict:
    sql, params = insert_statement("policy_account", values)
    row = await db.fetch_one(sql, *params)
    if row is None:
        raise InternalError("Failed to create policy account")
    return row


async def list_policies(db: Database, filters: FilterBuilder, pagination: Pagination) -> tuple[list[dict], int]:
    return await fetch_page(
        db,
        select_sql="""
        SELECT p.*, pa.account_name, pa.company_id, c.company_name
        FROM policy p
        JOIN policy_account pa ON pa.account_id = p.account_id
        JOIN company c ON c.company_id = pa.company_id
        {where}
        ORDER BY p.created_at DESC, p.policy_id DESC
        """,
        count_sql="""
        SELECT count(*)
        FROM policy p
        JOIN policy_account pa ON pa.account_id = p.account_id
        {where}
        """,
        filters=filters,
        pagination=pagination,
    )


async def get_policy(db: Database, policy_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT p.*, pa.account_name, pa.company_id, c.company_name
        FROM policy p
        JOIN policy_account pa ON pa.account_id = p.account_id
        JOIN company c ON c.company_id = pa.company_id
        WHERE p.policy_id = $1
        """,
        policy_id,
    )


async def create_policy(db: Database, values: dict[str, Any]) -> dict:
    sql, params = insert_statement("policy", values)
    row = await db.fetch_one(sql, *params)
    if row is None:
        raise InternalError("Failed to create policy")
    return row


async def update_policy(db: Database, policy_id: int, values: dict[str, Any]) -> dict | None:
    sql, params = update_statement("policy", "policy_id", policy_id, values)
    return await db.fetch_one(sql, *params)


async def delete_policy(db: Database, policy_id: int) -> bool:
    row = await db.fetch_one("DELETE FROM policy WHERE policy_id = $1 RETURNING policy_id", policy_id)
    return row is not None
