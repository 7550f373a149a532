"""
Pinwall - Custom Exceptions.

Centralized exception handling with standardized error responses.

Pin interaction failures (missing pin, non-owner tag edits, empty update
results) are not exceptions: the service reports them as outcomes. The
classes here cover the application shell: auth, feature flags and request
validation.
"""

from typing import Any
from uuid import UUID


class PinwallException(Exception):
    """Base exception for Pinwall application."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        request_id: UUID | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.request_id = request_id
        super().__init__(message)


class UnauthorizedException(PinwallException):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class ValidationException(PinwallException):
    """Raised for validation errors."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details={"errors": errors} if errors else None,
        )


class FeatureDisabledException(PinwallException):
    """Raised when a feature flag is disabled."""

    def __init__(self, feature_name: str):
        super().__init__(
            code="FEATURE_DISABLED",
            message=f"Feature '{feature_name}' is currently disabled",
            status_code=503,
            details={"feature": feature_name},
        )


class StorageNotConfiguredException(PinwallException):
    """Raised when the Supabase backend is selected without real credentials."""

    def __init__(self, message: str):
        super().__init__(
            code="STORAGE_NOT_CONFIGURED",
            message=message,
            status_code=503,
        )
