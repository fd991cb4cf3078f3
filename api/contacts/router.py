"""
Contact API endpoints.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from auth.dependencies import ADMIN, AGENT, MANAGER, get_current_user, get_user_db, require_roles
from core.db import Database
from core.pagination import Pagination, pagination_params
from core.responses import format_paginated_response, format_response

from . import repository, schemas, service

router = APIRouter(prefix="/contacts", dependencies=[Depends(get_current_user)])

ContactId = Annotated[int, Path(ge=1)]


@router.get("")
async def list_contacts(
    search: str | None = Query(default=None, max_length=200),
    company_id: int | None = Query(default=None, ge=1),
    pagination: Pagination = Depends(pagination_params),
    db: Database = Depends(get_user_db),
) -> dict:
    filters = service.contact_filters(search=search, company_id=company_id)
    rows, total = await repository.list_contacts(db, filters, pagination)
    return format_paginated_response(rows, pagination, total)


@router.get("/{contact_id}")
async def get_contact(contact_id: ContactId, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.get_contact(db, contact_id))


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_roles(ADMIN, MANAGER, AGENT))])
async def create_contact(payload: schemas.ContactCreate, db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.create_contact(db, payload), "Contact created successfully")


@router.put("/{contact_id}", dependencies=[Depends(require_roles(ADMIN, MANAGER, AGENT))])
async def update_contact(
    payload: schemas.ContactUpdate,
    contact_id: ContactId,
    db: Database = Depends(get_user_db),
) -> dict:
    return format_response(await service.update_contact(db, contact_id, payload), "Contact updated successfully")


@router.delete("/{contact_id}", dependencies=[Depends(require_roles(ADMIN, MANAGER))])
async def delete_contact(contact_id: ContactId, db: Database = Depends(get_user_db)) -> dict:
    await service.delete_contact(db, contact_id)
    return format_response(None, "Contact deleted successfully")
