"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. The application lifespan opens it on
startup, stores the `Database` on `app.state.db` and closes it on shutdown
(see `api/main.py`). Handlers receive it through the `get_db` dependency.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Every call is bounded by the current request deadline (see `deadline_scope`):
the remaining budget is passed to asyncpg as `timeout`, which cancels the
in-flight query when it runs out.
"""

from __future__ import annotations

import asyncio
import contextvars
import json
import logging
import time
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Iterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg
from fastapi import Request

from .config import Settings

logger = logging.getLogger(__name__)

_deadline: contextvars.ContextVar[float | None] = contextvars.ContextVar("request_deadline", default=None)


class DeadlineExceeded(asyncio.TimeoutError):
    pass


@contextmanager
def deadline_scope(seconds: float) -> Iterator[None]:
    """
    Bound every query issued inside this scope to finish within `seconds`.
    """
    token = _deadline.set(time.monotonic() + seconds)
    try:
        yield
    finally:
        _deadline.reset(token)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


async def _init_connection(conn: asyncpg.Connection) -> None:
    # jsonb columns (permissions, profile locations/assets/operations, changed_fields)
    # round-trip as Python dicts.
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=lambda value: json.dumps(value, default=str),
            decoder=json.loads,
            schema="pg_catalog",
        )


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    """
    Thin executor over an asyncpg pool or a single connection.

    Both expose fetchrow/fetch/fetchval/execute, so a transaction simply hands
    out a `Database` bound to its connection.
    """

    def __init__(self, executor: asyncpg.Pool | asyncpg.Connection, *, command_timeout: float) -> None:
        self._executor = executor
        self._command_timeout = command_timeout

    def _timeout(self) -> float:
        deadline = _deadline.get()
        if deadline is None:
            return self._command_timeout
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise DeadlineExceeded("Request deadline exceeded before query started.")
        return min(self._command_timeout, remaining)

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        row = await self._executor.fetchrow(sql, *args, timeout=self._timeout())
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        rows = await self._executor.fetch(sql, *args, timeout=self._timeout())
        return [_record_to_dict(r) for r in rows]

    async def fetch_val(self, sql: str, *args: Any) -> Any:
        return await self._executor.fetchval(sql, *args, timeout=self._timeout())

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the status tag, e.g. "DELETE 1".
        """
        return await self._executor.execute(sql, *args, timeout=self._timeout())

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["Database"]:
        if isinstance(self._executor, asyncpg.Connection):
            async with self._executor.transaction():
                yield self
            return

        async with self._executor.acquire() as conn:
            async with conn.transaction():
                yield Database(conn, command_timeout=self._command_timeout)


async def connect(settings: Settings) -> tuple[asyncpg.Pool, Database]:
    pool = await asyncpg.create_pool(
        dsn=_sanitize_database_url(settings.database_url),
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        command_timeout=settings.db_command_timeout,
        init=_init_connection,
    )
    logger.info(
        "db_pool_opened min_size=%s max_size=%s",
        settings.db_pool_min_size,
        settings.db_pool_max_size,
    )
    return pool, Database(pool, command_timeout=settings.db_command_timeout)


async def close(pool: asyncpg.Pool) -> None:
    await pool.close()
    logger.info("db_pool_closed")


def get_db(request: Request) -> Database:
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise RuntimeError("DB pool is not initialized. It is opened by the application lifespan.")
    return db
