"""
Company API endpoints.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from auth.dependencies import ADMIN, AGENT, MANAGER, UNDERWRITER, get_current_user, get_user_db, require_roles
from core.db import Database
from core.pagination import Pagination, pagination_params
from core.responses import format_paginated_response, format_response

from . import schemas, service

router = APIRouter(prefix="/companies", dependencies=[Depends(get_current_user)])

CompanyId = Annotated[int, Path(ge=1, description="Company id")]


@router.get("")
async def list_companies(
    search: str | None = Query(default=None, max_length=200),
    industry: str | None = Query(default=None, max_length=100),
    size: schemas.CompanySize | None = None,
    status_filter: schemas.CompanyStatus | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_user_db),
) -> dict:
    filters = service.company_filters(search=search, industry=industry, size=size, status=status_filter)
    rows, total = await service.list_companies(db, filters, pagination)
    return format_paginated_response(rows, pagination, total)


@router.get("/{company_id}")
async def get_company(company_id: CompanyId, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.get_company(db, company_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_company(
    payload: schemas.CompanyCreate,
    current_user: dict = Depends(require_roles(ADMIN, MANAGER, AGENT)),
    db: Database = Depends(get_user_db),
) -> dict:
    row = await service.create_company(db, current_user, payload)
    return format_response(row, "Company created successfully")


@router.put("/{company_id}")
async def update_company(
    payload: schemas.CompanyUpdate,
    company_id: CompanyId,
    current_user: dict = Depends(require_roles(ADMIN, MANAGER, AGENT)),
    db: Database = Depends(get_user_db),
) -> dict:
    row = await service.update_company(db, current_user, company_id, payload)
    return format_response(row, "Company updated successfully")


@router.delete("/{company_id}")
async def delete_company(
    company_id: CompanyId,
    current_user: dict = Depends(require_roles(ADMIN, MANAGER)),
    db: Database = Depends(get_user_db),
) -> dict:
    await service.delete_company(db, current_user, company_id)
    return format_response(None, "Company deleted successfully")


@router.get("/{company_id}/profile")
async def get_business_profile(company_id: CompanyId, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.get_business_profile(db, company_id))


@router.put("/{company_id}/profile")
async def update_business_profile(
    payload: schemas.BusinessProfileUpdate,
    company_id: CompanyId,
    current_user: dict = Depends(require_roles(ADMIN, MANAGER, AGENT)),
    db: Database = Depends(get_user_db),
) -> dict:
    row = await service.update_business_profile(db, current_user, company_id, payload)
    return format_response(row, "Business profile updated successfully")


@router.get("/{company_id}/risk-factors")
async def list_risk_factors(company_id: CompanyId, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.list_risk_factors(db, company_id))


@router.post("/{company_id}/risk-factors", status_code=status.HTTP_201_CREATED)
async def add_risk_factor(
    payload: schemas.RiskFactorCreate,
    company_id: CompanyId,
    current_user: dict = Depends(require_roles(ADMIN, MANAGER, UNDERWRITER)),
    db: Database = Depends(get_user_db),
) -> dict:
    row = await service.add_risk_factor(db, current_user, company_id, payload)
    return format_response(row, "Risk factor added successfully")


@router.get("/{company_id}/change-events")
async def list_change_events(
    company_id: CompanyId,
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_user_db),
) -> dict:
    rows, total = await service.list_change_events(db, company_id, pagination)
    return format_paginated_response(rows, pagination, total)
