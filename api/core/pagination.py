"""
Page/limit handling shared by list endpoints.
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass

from fastapi import Query

from .db import Database
from .sql import FilterBuilder

MAX_LIMIT = 100


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    limit: int = 20

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if not 1 <= self.limit <= MAX_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_LIMIT}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def info(self, total: int) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "totalPages": math.ceil(total / self.limit) if total else 0,
            "hasNext": self.page * self.limit < total,
            "hasPrev": self.page > 1,
        }


def pagination_params(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_LIMIT),
) -> Pagination:
    return Pagination(page=page, limit=limit)


async def fetch_page(
    db: Database,
    *,
    select_sql: str,
    count_sql: str,
    filters: FilterBuilder,
    pagination: Pagination,
) -> tuple[list[dict], int]:
    """
    Run a filtered page query and its count query concurrently.

    Both templates carry a `{where}` slot; `select_sql` must end with its ORDER BY
    (LIMIT/OFFSET placeholders are appended here).
    """
    where_sql, params = filters.compile()
    n = len(params)
    page_sql = select_sql.format(where=where_sql) + f"\nLIMIT ${n + 1} OFFSET ${n + 2}"

    rows, total = await asyncio.gather(
        db.fetch_all(page_sql, *params, pagination.limit, pagination.offset),
        db.fetch_val(count_sql.format(where=where_sql), *params),
    )
    return rows, int(total or 0)
