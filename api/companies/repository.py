"""
Company persistence (raw SQL): companies, business profiles, risk factors
and the change-event audit trail.
"""

from __future__ import annotations

from typing import Any

from core.db import Database
from core.errors import InternalError
from core.pagination import Pagination, fetch_page
from core.sql import FilterBuilder, insert_statement, update_statement

PROFILE_FIELDS = (
    "employee_count",
    "annual_revenue",
    "business_description",
    "locations",
    "assets",
    "operations",
)


async def list_companies(db: Database, filters: FilterBuilder, pagination: Pagination) -> tuple[list[dict], int]:
    return await fetch_page(
        db,
        select_sql="""
        SELECT c.*, bp.employee_count, bp.annual_revenue
        FROM company c
        LEFT JOIN business_profile bp
          ON bp.company_id = c.company_id AND bp.is_current = true
        {where}
        ORDER BY c.created_at DESC, c.company_id DESC
        """,
        count_sql="""
        SELECT count(*)
        FROM company c
        {where}
        """,
        filters=filters,
        pagination=pagination,
    )


async def get_company(db: Database, company_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT c.*, bp.employee_count, bp.annual_revenue
        FROM company c
        LEFT JOIN business_profile bp
          ON bp.company_id = c.company_id AND bp.is_current = true
        WHERE c.company_id = $1
        """,
        company_id,
    )


async def company_exists(db: Database, company_id: int) -> bool:
    row = await db.fetch_one("SELECT 1 AS ok FROM company WHERE company_id = $1", company_id)
    return row is not None


async def create_company(db: Database, values: dict[str, Any], *, created_by: int) -> dict:
    sql, params = insert_statement("company", {**values, "created_by": created_by})
    row = await db.fetch_one(sql, *params)
    if row is None:
        raise InternalError("Failed to create company")
    return row


async def update_company(db: Database, company_id: int, values: dict[str, Any]) -> dict | None:
    sql, params = update_statement("company", "company_id", company_id, values)
    return await db.fetch_one(sql, *params)


async def delete_company(db: Database, company_id: int) -> bool:
    row = await db.fetch_one(
        "DELETE FROM company WHERE company_id = $1 RETURNING company_id",
        company_id,
    )
    return row is not None


async def lock_company(db: Database, company_id: int) -> bool:
    """
    Lock the company row for the rest of the transaction. Profile writers for
    one company queue here. Returns False when the company does not exist.
    """
    row = await db.fetch_one(
        "SELECT company_id FROM company WHERE company_id = $1 FOR UPDATE",
        company_id,
    )
    return row is not None


async def get_current_profile(db: Database, company_id: int) -> dict | None:
    return await db.fetch_one(
        """
        SELECT *
        FROM business_profile
        WHERE company_id = $1
          AND is_current = true
        """,
        company_id,
    )


async def next_profile_version(db: Database, company_id: int) -> int:
    version = await db.fetch_val(
        "SELECT COALESCE(max(profile_version), 0) + 1 FROM business_profile WHERE company_id = $1",
        company_id,
    )
    return int(version)


async def insert_current_profile(db: Database, company_id: int, values: dict[str, Any], *, version: int) -> dict:
    """
    Retire the current profile row (if any) and insert `values` as the new current one.
    Must run inside a transaction.
    """
    await db.execute(
        """
        UPDATE business_profile
        SET is_current = false
        WHERE company_id = $1
          AND is_current = true
        """,
        company_id,
    )
    sql, params = insert_statement(
        "business_profile",
        {**values, "company_id": company_id, "profile_version": version, "is_current": True},
        casts={"locations": "jsonb", "assets": "jsonb", "operations": "jsonb"},
    )
    row = await db.fetch_one(sql, *params)
    if row is None:
        raise InternalError("Failed to insert business profile")
    return row


async def list_risk_factors(db: Database, company_id: int) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT rf.*, su.first_name || ' ' || su.last_name AS identified_by_name
        FROM risk_factor rf
        LEFT JOIN staff_user su ON su.staff_id = rf.identified_by
        WHERE rf.company_id = $1
        ORDER BY rf.created_at DESC, rf.risk_factor_id DESC
        """,
        company_id,
    )


async def insert_risk_factor(db: Database, company_id: int, values: dict[str, Any], *, identified_by: int) -> dict:
    sql, params = insert_statement(
        "risk_factor",
        {**values, "company_id": company_id, "identified_by": identified_by},
    )
    row = await db.fetch_one(sql, *params)
    if row is None:
        raise InternalError("Failed to insert risk factor")
    return row


async def list_change_events(db: Database, company_id: int, pagination: Pagination) -> tuple[list[dict], int]:
    filters = FilterBuilder().add("ce.company_id", "=", company_id)
    return await fetch_page(
        db,
        select_sql="""
        SELECT ce.*, su.first_name || ' ' || su.last_name AS changed_by_name
        FROM change_event ce
        LEFT JOIN staff_user su ON su.staff_id = ce.changed_by
        {where}
        ORDER BY ce.created_at DESC, ce.event_id DESC
        """,
        count_sql="""
        SELECT count(*)
        FROM change_event ce
        {where}
        """,
        filters=filters,
        pagination=pagination,
    )


async def insert_change_event(
    db: Database,
    company_id: int,
    *,
    event_type: str,
    description: str,
    changed_fields: dict[str, Any] | None,
    changed_by: int,
) -> None:
    await db.execute(
        """
        INSERT INTO change_event (company_id, event_type, description, changed_fields, changed_by)
        VALUES ($1, $2, $3, $4::jsonb, $5)
        """,
        company_id,
        event_type,
        description,
        changed_fields or {},
        changed_by,
    )
