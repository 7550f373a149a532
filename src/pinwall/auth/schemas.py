"""
Pinwall Auth - Schemas.

Pydantic models for the authenticated requester.
"""

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """Access token claims."""

    sub: str = Field(..., description="User ID")
    name: str | None = Field(default=None, description="Display name")
    service: str | None = Field(default=None, description="Identity provider (twitter, google, ...)")
    typ: str | None = None
    iss: str | None = None
    exp: int | None = None
    iat: int | None = None


class User(BaseModel):
    """Authenticated requester identity."""

    user_id: str
    display_name: str | None = None
    service: str | None = None

    def identity(self) -> dict[str, str | None]:
        """Saver identity as stored in a pin's saved_by list."""
        return {
            "user_id": self.user_id,
            "display_name": self.display_name,
            "service": self.service,
        }
