"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from core.config import Settings, get_settings
from core.db import Database, get_db
from core.responses import format_response

from . import dependencies, schemas, service

router = APIRouter(prefix="/auth")


@router.post("/login")
async def login(
    payload: schemas.LoginRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    data = await service.login(db, settings, payload)
    return format_response(data, "Login successful")


@router.post("/refresh")
async def refresh(
    payload: schemas.RefreshRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    data = await service.refresh(db, settings, payload)
    return format_response(data, "Token refreshed")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: schemas.RegisterRequest,
    current_user: dict = Depends(dependencies.get_current_user),
    db: Database = Depends(dependencies.get_user_db),
) -> dict:
    data = await service.register(db, current_user, payload)
    return format_response(data, "User registered successfully")


@router.get("/profile")
async def profile(user: dict = Depends(dependencies.get_active_user)) -> dict:
    return format_response(service.profile(user))


@router.put("/change-password")
async def change_password(
    payload: schemas.ChangePasswordRequest,
    current_user: dict = Depends(dependencies.get_current_user),
    db: Database = Depends(dependencies.get_user_db),
) -> dict:
    await service.change_password(db, current_user, payload)
    return format_response(None, "Password changed successfully")
