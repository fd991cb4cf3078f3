"""
Policy API endpoints (including policy accounts).
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from auth.dependencies import ADMIN, AGENT, MANAGER, UNDERWRITER, get_current_user, get_user_db, require_roles
from core.db import Database
from core.pagination import Pagination, pagination_params
from core.responses import format_paginated_response, format_response

from . import repository, schemas, service

router = APIRouter(prefix="/policies", dependencies=[Depends(get_current_user)])

PolicyId = Annotated[int, Path(ge=1)]

_writers = require_roles(ADMIN, MANAGER, AGENT, UNDERWRITER)


# Account routes are declared before "/{policy_id}" so "accounts" is not parsed as an id.
@router.get("/accounts")
async def list_accounts(
    company_id: int | None = Query(default=None, ge=1),
    status_filter: schemas.AccountStatus | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_user_db),
) -> dict:
    filters = service.account_filters(company_id=company_id, status=status_filter)
    rows, total = await repository.list_accounts(db, filters, pagination)
    return format_paginated_response(rows, pagination, total)


@router.post("/accounts", status_code=status.HTTP_201_CREATED, dependencies=[Depends(_writers)])
async def create_account(payload: schemas.PolicyAccountCreate, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.create_account(db, payload), "Policy account created successfully")


@router.get("")
async def list_policies(
    search: str | None = Query(default=None, max_length=200),
    status_filter: schemas.PolicyStatus | None = Query(default=None, alias="status"),
    policy_type: str | None = Query(default=None, max_length=100),
    account_id: int | None = Query(default=None, ge=1),
    company_id: int | None = Query(default=None, ge=1),
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_user_db),
) -> dict:
    filters = service.policy_filters(
        search=search,
        status=status_filter,
        policy_type=policy_type,
        account_id=account_id,
        company_id=company_id,
    )
    rows, total = await repository.list_policies(db, filters, pagination)
    return format_paginated_response(rows, pagination, total)


@router.get("/{policy_id}")
async def get_policy(policy_id: PolicyId, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.get_policy(db, policy_id))


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(_writers)])
async def create_policy(payload: schemas.PolicyCreate, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.create_policy(db, payload), "Policy created successfully")


@router.put("/{policy_id}", dependencies=[Depends(_writers)])
async def update_policy(
    payload: schemas.PolicyUpdate,
    policy_id: PolicyId,
    db: Database = Depends(get_user_db),
) -> dict:
    return format_response(await service.update_policy(db, policy_id, payload), "Policy updated successfully")


@router.delete("/{policy_id}", dependencies=[Depends(require_roles(ADMIN, MANAGER))])
async def delete_policy(policy_id: PolicyId, db: Database = Depends(get_user_db)) -> dict:
    await service.delete_policy(db, policy_id)
    return format_response(None, "Policy deleted successfully")
