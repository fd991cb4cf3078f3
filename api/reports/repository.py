"""
Report queries.
"""

from __future__ import annotations

from core.db import Database
from core.pagination import Pagination, fetch_page
from core.sql import FilterBuilder


async def company_report(db: Database, filters: FilterBuilder, pagination: Pagination) -> tuple[list[dict], int]:
    """
    Active companies with their current profile figures and per-company
    account / policy / premium / open-task aggregates.
    """
    # Aggregates live in LATERAL subqueries so the joins cannot fan out the sums.
    return await fetch_page(
        db,
        select_sql="""
        SELECT
          c.*,
          bp.employee_count,
          bp.annual_revenue,
          COALESCE(acct.total_accounts, 0) AS total_accounts,
          COALESCE(pol.total_policies, 0) AS total_policies,
          COALESCE(acct.total_premium_value, 0) AS total_premium_value,
          COALESCE(tk.open_tasks, 0) AS open_tasks
        FROM company c
        LEFT JOIN business_profile bp
          ON bp.company_id = c.company_id AND bp.is_current = true
        LEFT JOIN LATERAL (
          SELECT count(*) AS total_accounts, SUM(pa.total_premium) AS total_premium_value
          FROM policy_account pa
          WHERE pa.company_id = c.company_id
        ) acct ON true
        LEFT JOIN LATERAL (
          SELECT count(*) AS total_policies
          FROM policy p
          JOIN policy_account pa ON pa.account_id = p.account_id
          WHERE pa.company_id = c.company_id
            AND p.status = 'active'
        ) pol ON true
        LEFT JOIN LATERAL (
          SELECT count(*) AS open_tasks
          FROM task t
          WHERE t.company_id = c.company_id
            AND t.status IN ('pending', 'in_progress')
        ) tk ON true
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
