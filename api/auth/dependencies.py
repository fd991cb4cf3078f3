"""
Auth dependencies for protected FastAPI routes.

FastAPI resolves dependencies before it validates query, path and body
parameters. `get_current_user` therefore only verifies the token; the user is
reloaded from the database by `get_user_db`, just before the request's first
query, so a request that fails validation never reaches SQL.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Iterable

from fastapi import Depends, Header, Request

from core.config import Settings, get_settings
from core.db import Database, get_db
from core.errors import Forbidden, Unauthorized

from . import service

ADMIN = "admin"
MANAGER = "manager"
AGENT = "agent"
UNDERWRITER = "underwriter"
CLAIMS_ADJUSTER = "claims_adjuster"


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise Unauthorized("Missing Authorization header.")

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise Unauthorized("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise Unauthorized("Authorization must be: Bearer <token>.")
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_user(
    request: Request,
    access_token: str = Depends(get_bearer_token),
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    Principal (`staff_id`, `username`, `role`) from a verified access token.
    """
    principal = service.principal_from_token(settings, access_token)
    request.state.user = principal
    return principal


class ActiveUserDatabase:
    """
    `Database` proxy that reloads the principal before the first statement.

    The reload fails with 401 when the user was removed, deactivated or had
    their role changed since the token was issued.
    """

    def __init__(self, db: Database, request: Request, principal: dict) -> None:
        self._db = db
        self._request = request
        self._principal = principal
        self._user: dict | None = None
        self._lock = asyncio.Lock()

    async def _ensure_user(self) -> None:
        if self._user is not None:
            return
        async with self._lock:
            if self._user is None:
                self._user = await service.load_active_user(self._db, self._principal)
                self._request.state.user = self._user

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        await self._ensure_user()
        return await self._db.fetch_one(sql, *args)

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        await self._ensure_user()
        return await self._db.fetch_all(sql, *args)

    async def fetch_val(self, sql: str, *args: Any) -> Any:
        await self._ensure_user()
        return await self._db.fetch_val(sql, *args)

    async def execute(self, sql: str, *args: Any) -> str:
        await self._ensure_user()
        return await self._db.execute(sql, *args)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Database]:
        await self._ensure_user()
        async with self._db.transaction() as tx:
            yield tx


async def get_user_db(
    request: Request,
    principal: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> Database:
    return ActiveUserDatabase(db, request, principal)


async def get_active_user(
    request: Request,
    principal: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> dict:
    """
    Reloaded user row, for routes without parameters to validate.
    """
    user = await service.load_active_user(db, principal)
    request.state.user = user
    return user


def authorize(principal: dict, allowed_roles: Iterable[str]) -> None:
    """
    Raise Forbidden unless the principal's role is one of `allowed_roles`.
    """
    if principal.get("role") not in set(allowed_roles):
        raise Forbidden("Insufficient permissions")


def require_roles(*roles: str) -> Callable:
    async def _guard(current_user: dict = Depends(get_current_user)) -> dict:
        authorize(current_user, roles)
        return current_user

    return _guard
