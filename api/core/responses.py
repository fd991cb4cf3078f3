"""
Success envelopes: `{"success": true, "message"?, "data"}`.
"""

from __future__ import annotations

from typing import Any

from .pagination import Pagination


def format_response(data: Any = None, message: str | None = None) -> dict:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body["data"] = data
    return body


def format_paginated_response(rows: list[dict], pagination: Pagination, total: int, message: str | None = None) -> dict:
    body = format_response(rows, message)
    body["pagination"] = pagination.info(total)
    return body
