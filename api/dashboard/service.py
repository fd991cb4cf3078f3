"""
Dashboard computations on top of the aggregate queries.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from core.db import Database
from tasks.schemas import DEFAULT_PRIORITY_RANK, PRIORITY_RANK

from . import repository


def revenue_growth(current: Decimal | float | int, previous: Decimal | float | int) -> float:
    """
    Month-over-month growth in percent, rounded half-up to 2 places.
    Defined as 0 when there was no revenue in the previous month.
    """
    previous = Decimal(str(previous or 0))
    current = Decimal(str(current or 0))
    if previous == 0:
        return 0.0
    growth = (current - previous) / previous * 100
    return float(growth.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def upcoming_task_sort_key(row: dict) -> tuple:
    due = row.get("due_date")
    return (
        PRIORITY_RANK.get(row.get("priority"), DEFAULT_PRIORITY_RANK),
        due is None,
        due or date.max,
    )


async def metrics(db: Database) -> dict:
    row = await repository.fetch_metrics(db)
    this_month = row.get("revenue_this_month") or 0
    previous_month = row.get("revenue_previous_month") or 0
    return {
        "totalCompanies": int(row.get("total_companies") or 0),
        "activePolicies": int(row.get("active_policies") or 0),
        "upcomingRenewals": int(row.get("upcoming_renewals") or 0),
        "tasksDue": int(row.get("tasks_due") or 0),
        "revenueThisMonth": float(this_month),
        "revenuePreviousMonth": float(previous_month),
        "revenueGrowth": revenue_growth(this_month, previous_month),
    }


async def recent_activities(db: Database, limit: int) -> list[dict]:
    return await repository.recent_activities(db, limit)


async def upcoming_tasks(db: Database, limit: int) -> list[dict]:
    rows = await repository.upcoming_tasks(db, limit)
    # Same key as the ORDER BY in the query.
    return sorted(rows, key=upcoming_task_sort_key)
