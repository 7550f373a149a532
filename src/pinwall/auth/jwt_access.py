"""Pinwall Auth - JWT access tokens.

This module implements:
- Issuing short-lived JWTs (HS256 by default)
- A FastAPI dependency to authenticate requests using these tokens

The token carries the requester identity used by pin interactions:
user id (`sub`), display name (`name`) and identity provider (`service`).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from pinwall.auth.schemas import TokenPayload, User
from pinwall.config import Settings, get_settings
from pinwall.exceptions import UnauthorizedException

security = HTTPBearer(auto_error=False)


def create_access_token(
    *,
    settings: Settings,
    user_id: str,
    display_name: str | None = None,
    service: str | None = None,
    now: datetime | None = None,
) -> tuple[str, int]:
    """Create a signed access token and return (token, expires_in_seconds)."""

    if now is None:
        now = datetime.now(timezone.utc)

    user_id = (user_id or "").strip()
    if not user_id:
        raise ValueError("user_id is required")

    ttl_s = int(settings.auth.access_token_ttl_seconds)
    exp = now + timedelta(seconds=ttl_s)

    payload: dict[str, Any] = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "typ": "access",
        "iss": "pinwall",
    }
    if display_name is not None:
        payload["name"] = display_name
    if service is not None:
        payload["service"] = service

    token = jwt.encode(payload, settings.auth.jwt_secret, algorithm=settings.auth.jwt_algorithm)
    return token, ttl_s


def decode_access_token(token: str, settings: Settings) -> TokenPayload:
    try:
        payload = jwt.decode(token, settings.auth.jwt_secret, algorithms=[settings.auth.jwt_algorithm])
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {e}")

    if payload.get("typ") != "access":
        raise UnauthorizedException("Invalid token type")

    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise UnauthorizedException("Malformed token payload")

    return TokenPayload(**payload)


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """Authenticate using a bearer access token."""

    if not credentials:
        raise UnauthorizedException("Missing authentication token")

    token = (credentials.credentials or "").strip()
    if not token or any(ch.isspace() for ch in token):
        raise UnauthorizedException("Invalid authentication token")

    claims = decode_access_token(token, settings)

    user = User(
        user_id=claims.sub,
        display_name=claims.name,
        service=claims.service,
    )

    request.state.user = user.model_dump()
    return user

