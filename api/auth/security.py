"""
Auth security helpers: password hashing and signed tokens.
"""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Any

import bcrypt
import jwt

from core.config import Settings

ACCESS = "access"
REFRESH = "refresh"


class AuthSecurityError(RuntimeError):
    pass


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def _encode(settings: Settings, payload: dict[str, Any], ttl: timedelta) -> str:
    issued_at = now_epoch_s()
    payload = {**payload, "iat": issued_at, "exp": issued_at + int(ttl.total_seconds())}
    return jwt.encode(payload, settings.jwt_secret.get_secret_value(), algorithm=settings.jwt_algorithm)


def build_access_token(
    settings: Settings,
    *,
    user_id: int,
    username: str,
    role: str,
    ttl: timedelta | None = None,
) -> str:
    payload = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "type": ACCESS,
    }
    return _encode(settings, payload, ttl or settings.access_token_ttl)


def build_refresh_token(settings: Settings, *, user_id: int, ttl: timedelta | None = None) -> str:
    payload = {
        "sub": str(user_id),
        "type": REFRESH,
    }
    return _encode(settings, payload, ttl or settings.refresh_token_ttl)


def decode_token(settings: Settings, token: str, *, expected_type: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Token is empty.")

    try:
        payload = jwt.decode(
            raw,
            settings.jwt_secret.get_secret_value(),
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Token has expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid token.") from exc

    token_type = str(payload.get("type") or "").strip().lower()
    if token_type != expected_type:
        raise AuthSecurityError(f"Expected a {expected_type} token.")

    return payload


def token_subject(payload: dict[str, Any]) -> int:
    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise AuthSecurityError("Invalid token subject.")
    return int(subject)
