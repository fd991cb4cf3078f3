"""
Dashboard aggregate queries.
"""

from __future__ import annotations

from core.db import Database
from tasks.schemas import DEFAULT_PRIORITY_RANK, OPEN_STATUSES, PRIORITY_RANK

RECENT_PER_SOURCE = 5


def priority_order_sql(column: str = "t.priority") -> str:
    # Built from constants only; no request data reaches this fragment.
    whens = " ".join(f"WHEN '{name}' THEN {rank}" for name, rank in PRIORITY_RANK.items())
    return f"CASE {column} {whens} ELSE {DEFAULT_PRIORITY_RANK} END"


async def fetch_metrics(db: Database) -> dict:
    row = await db.fetch_one(
        """
        WITH company_stats AS (
            SELECT count(*) AS total_companies
            FROM company
            WHERE status = 'active'
        ),
        policy_stats AS (
            SELECT
                count(*) AS active_policies,
                count(*) FILTER (WHERE p.expiration_date <= CURRENT_DATE + INTERVAL '30 days') AS upcoming_renewals
            FROM policy p
            JOIN policy_account pa ON pa.account_id = p.account_id
            WHERE p.status = 'active'
        ),
        task_stats AS (
            SELECT count(*) AS tasks_due
            FROM task
            WHERE status = ANY($1::text[])
              AND due_date <= CURRENT_DATE + INTERVAL '7 days'
        ),
        revenue_stats AS (
            SELECT
                COALESCE(SUM(pa.total_premium) FILTER (
                    WHERE date_trunc('month', pa.created_at) = date_trunc('month', CURRENT_DATE)
                ), 0) AS revenue_this_month,
                COALESCE(SUM(pa.total_premium) FILTER (
                    WHERE date_trunc('month', pa.created_at) = date_trunc('month', CURRENT_DATE - INTERVAL '1 month')
                ), 0) AS revenue_previous_month
            FROM policy_account pa
            WHERE pa.status = 'active'
        )
        SELECT cs.total_companies, ps.active_policies, ps.upcoming_renewals, ts.tasks_due,
               rs.revenue_this_month, rs.revenue_previous_month
        FROM company_stats cs, policy_stats ps, task_stats ts, revenue_stats rs
        """,
        list(OPEN_STATUSES),
    )
    return row or {}


async def recent_activities(db: Database, limit: int) -> list[dict]:
    return await db.fetch_all(
        """
        (
            SELECT 'company' AS type,
                   'Company created: ' || company_name AS description,
                   created_at AS activity_date,
                   company_id::text AS reference_id
            FROM company
            ORDER BY created_at DESC
            LIMIT $1
        )
        UNION ALL
        (
            SELECT 'policy' AS type,
                   'Policy created: ' || policy_number AS description,
                   created_at AS activity_date,
                   policy_id::text AS reference_id
            FROM policy
            ORDER BY created_at DESC
            LIMIT $1
        )
        UNION ALL
        (
            SELECT 'task' AS type,
                   'Task created: ' || title AS description,
                   created_at AS activity_date,
                   task_id::text AS reference_id
            FROM task
            ORDER BY created_at DESC
            LIMIT $1
        )
        ORDER BY activity_date DESC
        LIMIT $2
        """,
        RECENT_PER_SOURCE,
        limit,
    )


async def upcoming_tasks(db: Database, limit: int) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT t.*, c.company_name, su.first_name || ' ' || su.last_name AS assigned_to_name
        FROM task t
        LEFT JOIN company c ON c.company_id = t.company_id
        LEFT JOIN staff_user su ON su.staff_id = t.assigned_to
        WHERE t.status = ANY($1::text[])
        ORDER BY {priority_order_sql()}, t.due_date ASC
        LIMIT $2
        """,
        list(OPEN_STATUSES),
        limit,
    )
