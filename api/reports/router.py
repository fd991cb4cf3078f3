"""
Report API endpoints.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from auth.dependencies import get_current_user, get_user_db
from companies.schemas import CompanySize
from core.db import Database
from core.pagination import Pagination, pagination_params
from core.responses import format_paginated_response

from . import service

router = APIRouter(prefix="/reports", dependencies=[Depends(get_current_user)])


@router.get("/companies")
async def company_report(
    industry: str | None = Query(default=None, max_length=100),
    size: CompanySize | None = None,
    date_from: date | None = Query(default=None, alias="dateFrom"),
    date_to: date | None = Query(default=None, alias="dateTo"),
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_user_db),
) -> dict:
    filters = service.company_report_filters(industry=industry, size=size, date_from=date_from, date_to=date_to)
    rows, total = await service.company_report(db, filters, pagination)
    return format_paginated_response(rows, pagination, total)
