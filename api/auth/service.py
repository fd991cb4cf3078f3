"""
Auth business logic.
"""

from __future__ import annotations

import logging

import asyncpg

from core.config import Settings
from core.db import Database
from core.errors import BadRequest, Forbidden, Unauthorized, constraint_error

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def to_user_data(user_row: dict) -> dict:
    return {
        "id": int(user_row["staff_id"]),
        "username": str(user_row["username"]),
        "email": str(user_row["email"]),
        "firstName": user_row.get("first_name"),
        "lastName": user_row.get("last_name"),
        "role": str(user_row["role"]),
        "department": user_row.get("department"),
        "permissions": user_row.get("permissions") or {},
        "createdAt": user_row.get("created_at"),
    }


def _issue_token_pair(settings: Settings, user_row: dict) -> dict:
    user_id = int(user_row["staff_id"])
    return {
        "token": security.build_access_token(
            settings,
            user_id=user_id,
            username=str(user_row["username"]),
            role=str(user_row["role"]),
        ),
        "refreshToken": security.build_refresh_token(settings, user_id=user_id),
        "expiresIn": settings.jwt_expire,
    }


async def login(db: Database, settings: Settings, payload: schemas.LoginRequest) -> dict:
    user_row = await repository.get_active_user_by_identifier(db, payload.username)
    if user_row is None:
        raise Unauthorized("Invalid credentials")

    if not security.verify_password(payload.password, str(user_row.get("password_hash") or "")):
        logger.info("login_failed username=%s", user_row["username"])
        raise Unauthorized("Invalid credentials")

    logger.info("user_logged_in username=%s email=%s", user_row["username"], user_row["email"])
    return {"user": to_user_data(user_row), **_issue_token_pair(settings, user_row)}


async def refresh(db: Database, settings: Settings, payload: schemas.RefreshRequest) -> dict:
    try:
        claims = security.decode_token(settings, payload.refresh_token, expected_type=security.REFRESH)
        user_id = security.token_subject(claims)
    except security.AuthSecurityError as exc:
        raise Unauthorized(str(exc)) from exc

    user_row = await repository.get_user_by_id(db, user_id)
    if user_row is None or not bool(user_row.get("is_active", False)):
        raise Unauthorized("Invalid refresh token owner.")

    return _issue_token_pair(settings, user_row)


async def register(db: Database, current_user: dict, payload: schemas.RegisterRequest) -> dict:
    if current_user.get("role") != "admin":
        raise Forbidden("Only administrators can register new users")

    # Fast path for the common case; the unique constraints decide under concurrency.
    if await repository.username_or_email_taken(db, username=payload.username, email=payload.email):
        raise BadRequest("Username or email already exists")

    try:
        user_row = await repository.create_user(
            db,
            username=payload.username,
            email=payload.email,
            password_hash=security.hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=payload.role,
            department=payload.department,
            permissions=payload.permissions,
        )
    except asyncpg.UniqueViolationError as exc:
        raise BadRequest("Username or email already exists") from exc
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise constraint_error(exc, what="User") from exc

    logger.info("user_registered username=%s by=%s", user_row["username"], current_user.get("username"))
    return to_user_data(user_row)


def profile(user_row: dict) -> dict:
    return to_user_data(user_row)


async def change_password(db: Database, current_user: dict, payload: schemas.ChangePasswordRequest) -> None:
    user_id = int(current_user["staff_id"])
    password_hash = await repository.get_password_hash(db, user_id)
    if not security.verify_password(payload.current_password, password_hash or ""):
        raise BadRequest("Current password is incorrect")

    await repository.set_password_hash(db, user_id, security.hash_password(payload.new_password))
    logger.info("password_changed username=%s", current_user.get("username"))


def principal_from_token(settings: Settings, access_token: str) -> dict:
    """
    Verify an access token and build the principal from its claims.
    No database access; `load_active_user` confirms the user afterwards.
    """
    try:
        claims = security.decode_token(settings, access_token, expected_type=security.ACCESS)
        user_id = security.token_subject(claims)
    except security.AuthSecurityError as exc:
        raise Unauthorized(str(exc)) from exc

    return {
        "staff_id": user_id,
        "username": str(claims.get("username") or ""),
        "role": str(claims.get("role") or ""),
    }


async def load_active_user(db: Database, principal: dict) -> dict:
    user_row = await repository.get_user_by_id(db, int(principal["staff_id"]))
    if user_row is None:
        raise Unauthorized("User not found.")
    if not bool(user_row.get("is_active", False)):
        raise Unauthorized("User is inactive.")
    if str(user_row["role"]) != principal.get("role"):
        raise Unauthorized("Token is out of date.")
    return user_row
