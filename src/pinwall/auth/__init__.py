"""Pinwall Auth Module.

Requests authenticate with short-lived bearer JWTs. Login and identity
providers live outside this service; it only validates the token and
exposes the requester identity to the pin routes.
"""

from pinwall.auth.jwt_access import (
    create_access_token,
    decode_access_token,
    get_current_user,
)
from pinwall.auth.schemas import TokenPayload, User

__all__ = [
    "get_current_user",
    "create_access_token",
    "decode_access_token",
    "TokenPayload",
    "User",
]
