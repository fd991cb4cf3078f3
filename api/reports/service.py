"""
Report filters and orchestration.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone

from core.db import Database
from core.errors import BadRequest
from core.pagination import Pagination
from core.sql import FilterBuilder

from . import repository


def _start_of(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _end_of(day: date) -> datetime:
    return datetime.combine(day, time.max, tzinfo=timezone.utc)


def company_report_filters(
    *,
    industry: str | None = None,
    size: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> FilterBuilder:
    if date_from and date_to and date_to < date_from:
        raise BadRequest("dateTo must not be before dateFrom")
    return (
        FilterBuilder()
        .add("c.status", "=", "active")
        .contains(industry, "c.primary_industry")
        .add_if(size, "c.company_size")
        .add_if(_start_of(date_from) if date_from else None, "c.created_at", ">=")
        .add_if(_end_of(date_to) if date_to else None, "c.created_at", "<=")
    )


async def company_report(db: Database, filters: FilterBuilder, pagination: Pagination) -> tuple[list[dict], int]:
    return await repository.company_report(db, filters, pagination)
