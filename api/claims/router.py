"""
Claim API endpoints.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from auth.dependencies import ADMIN, AGENT, CLAIMS_ADJUSTER, MANAGER, get_current_user, get_user_db, require_roles
from core.db import Database
from core.pagination import Pagination, pagination_params
from core.responses import format_paginated_response, format_response

from . import repository, schemas, service

router = APIRouter(prefix="/claims", dependencies=[Depends(get_current_user)])

ClaimId = Annotated[int, Path(ge=1)]

_writers = require_roles(ADMIN, MANAGER, CLAIMS_ADJUSTER, AGENT)


@router.get("")
async def list_claims(
    search: str | None = Query(default=None, max_length=200),
    status_filter: schemas.ClaimStatus | None = Query(default=None, alias="status"),
    policy_id: int | None = Query(default=None, ge=1),
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_user_db),
) -> dict:
    filters = service.claim_filters(search=search, status=status_filter, policy_id=policy_id)
    rows, total = await repository.list_claims(db, filters, pagination)
    return format_paginated_response(rows, pagination, total)


@router.get("/{claim_id}")
async def get_claim(claim_id: ClaimId, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.get_claim(db, claim_id))


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(_writers)])
async def create_claim(payload: schemas.ClaimCreate, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.create_claim(db, payload), "Claim created successfully")


@router.put("/{claim_id}", dependencies=[Depends(_writers)])
async def update_claim(payload: schemas.ClaimUpdate, claim_id: ClaimId, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.update_claim(db, claim_id, payload), "Claim updated successfully")


@router.delete("/{claim_id}", dependencies=[Depends(require_roles(ADMIN, MANAGER))])
async def delete_claim(claim_id: ClaimId, db: Database = Depends(get_user_db)) -> dict:
    await service.delete_claim(db, claim_id)
    return format_response(None, "Claim deleted successfully")
