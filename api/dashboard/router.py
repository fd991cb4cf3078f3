"""
Dashboard API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth.dependencies import get_current_user, get_user_db
from core.db import Database
from core.responses import format_response

from . import service

router = APIRouter(prefix="/dashboard", dependencies=[Depends(get_current_user)])


@router.get("/metrics")
async def metrics(db: Database = Depends(get_user_db)) -> dict:
    return format_response(await service.metrics(db))


@router.get("/recent-activities")
async def recent_activities(
    limit: int = Query(10, ge=1, le=100),
    db: Database = Depends(get_user_db),
) -> dict:
    return format_response(await service.recent_activities(db, limit))


@router.get("/upcoming-tasks")
async def upcoming_tasks(
    limit: int = Query(5, ge=1, le=100),
    db: Database = Depends(get_user_db),
) -> dict:
    return format_response(await service.upcoming_tasks(db, limit))
