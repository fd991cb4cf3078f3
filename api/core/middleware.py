"""
Application middleware: security headers, compression, rate limiting, CORS,
request logging and the per-request deadline.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .config import Settings
from .db import deadline_scope

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}


def get_limiter(settings: Settings) -> Limiter:
    """Fixed window per client address."""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        enabled=settings.rate_limit_enabled,
    )


async def security_headers_middleware(request: Request, call_next) -> Response:
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


async def logging_middleware(request: Request, call_next) -> Response:
    """Logs every request."""
    start_time = time.monotonic()
    response = await call_next(request)
    duration_ms = round((time.monotonic() - start_time) * 1000, 2)

    logger.info(
        "http_request method=%s path=%s status=%s duration_ms=%s client=%s",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
        request.client.host if request.client else "unknown",
    )
    return response


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Install the chain. Starlette runs the last-added middleware first, so the
    request passes: security headers -> gzip -> rate limit -> CORS -> logging -> deadline.
    """

    async def deadline_middleware(request: Request, call_next) -> Response:
        with deadline_scope(settings.request_timeout_seconds):
            return await call_next(request)

    app.middleware("http")(deadline_middleware)
    app.middleware("http")(logging_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.state.limiter = get_limiter(settings)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.middleware("http")(security_headers_middleware)
