"""
Pinwall - Common Schemas.

Shared Pydantic models used across all modules.
"""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


# =============================================================================
# Error Responses
# =============================================================================


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional context")
    request_id: UUID | None = Field(default=None, description="Request ID for tracing")


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: ErrorDetail


# =============================================================================
# Health Check
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., pattern="^(healthy|degraded)$")
    version: str
    features: dict[str, bool]
    app_env: str | None = None
    storage_backend: str | None = None
    pending_background_tasks: int = 0
