"""
Staff user persistence helpers.
"""

from __future__ import annotations

from typing import Any

from core.db import Database
from core.errors import InternalError

_PUBLIC_COLUMNS = """
    staff_id, username, email, first_name, last_name, role, department,
    permissions, is_active, created_at, updated_at
"""


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def get_active_user_by_identifier(db: Database, identifier: str) -> dict | None:
    """
    Look up an active user by username or email (used by login).
    """
    return await db.fetch_one(
        f"""
        SELECT {_PUBLIC_COLUMNS}, password_hash
        FROM staff_user
        WHERE (username = $1 OR lower(email) = lower($1))
          AND is_active = true
        """,
        (identifier or "").strip(),
    )


async def get_user_by_id(db: Database, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_PUBLIC_COLUMNS}
        FROM staff_user
        WHERE staff_id = $1
        """,
        user_id,
    )


async def get_password_hash(db: Database, user_id: int) -> str | None:
    return await db.fetch_val(
        "SELECT password_hash FROM staff_user WHERE staff_id = $1",
        user_id,
    )


async def username_or_email_taken(db: Database, *, username: str, email: str) -> bool:
    row = await db.fetch_one(
        """
        SELECT staff_id
        FROM staff_user
        WHERE username = $1 OR lower(email) = lower($2)
        LIMIT 1
        """,
        username,
        normalize_email(email),
    )
    return row is not None


async def create_user(
    db: Database,
    *,
    username: str,
    email: str,
    password_hash: str,
    first_name: str,
    last_name: str,
    role: str,
    department: str,
    permissions: dict[str, Any],
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO staff_user (
            username, email, password_hash, first_name, last_name, role, department, permissions
        )
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8::jsonb)
        RETURNING {_PUBLIC_COLUMNS}
        """,
        username,
        normalize_email(email),
        password_hash,
        first_name,
        last_name,
        role,
        department,
        permissions,
    )
    if row is None:
        raise InternalError("Failed to create user")
    return row


async def set_password_hash(db: Database, user_id: int, password_hash: str) -> None:
    await db.execute(
        """
        UPDATE staff_user
        SET password_hash = $2,
            updated_at = now()
        WHERE staff_id = $1
        """,
        user_id,
        password_hash,
    )
