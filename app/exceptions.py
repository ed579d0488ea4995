# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error carries a human-readable message that is shown to the shopper
# verbatim, plus a machine-readable code and an optional suggestion.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class BoxCurateException(Exception):
    """
    Base exception for the BoxCurate API.

    All custom exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str = "BOXCURATE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Validation Exceptions
# =============================================================================

class ValidationFailedError(BoxCurateException):
    """Raised when user input is rejected before any network call."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_FAILED",
            status_code=400,
            details={"field": field} if field else None,
        )


class BudgetExceededError(BoxCurateException):
    """
    Raised when a selection change would push the subtotal past the
    effective budget. The selection is left exactly as it was.
    """

    def __init__(self, item_id: str, new_total: str, effective_budget: str, message: str):
        super().__init__(
            message=message,
            code="BUDGET_EXCEEDED",
            status_code=409,
            suggestion="Remove an item or raise the package budget",
            details={
                "item_id": item_id,
                "new_total": new_total,
                "effective_budget": effective_budget,
            },
        )


class InvalidSelectionError(BoxCurateException):
    """Raised when an operation does not fit the item (e.g. incrementing a single-unit item)."""

    def __init__(self, item_id: str, reason: str):
        super().__init__(
            message=reason,
            code="INVALID_SELECTION",
            status_code=400,
            details={"item_id": item_id},
        )


class NoActivePackageError(BoxCurateException):
    """Raised when selection operations run before a package was started."""

    def __init__(self, user_id: str):
        super().__init__(
            message="No package in progress",
            code="NO_ACTIVE_PACKAGE",
            status_code=400,
            suggestion="Start a package with POST /package first",
            details={"user_id": user_id},
        )


# =============================================================================
# Not Found Exceptions
# =============================================================================

class ItemNotFoundError(BoxCurateException):
    """Raised when a catalog item ID doesn't exist."""

    def __init__(self, item_id: str, kind: str):
        super().__init__(
            message=f"Item not found: {item_id}",
            code="ITEM_NOT_FOUND",
            status_code=404,
            suggestion="The item may have been removed from the catalog",
            details={"item_id": item_id, "kind": kind},
        )


class CurationNotFoundError(BoxCurateException):
    """Raised when a saved draft ID doesn't exist."""

    def __init__(self, curation_id: str):
        super().__init__(
            message=f"Curation not found: {curation_id}",
            code="CURATION_NOT_FOUND",
            status_code=404,
            suggestion="List your saved curations to find a valid id",
            details={"curation_id": curation_id},
        )


class ProfileNotFoundError(BoxCurateException):
    """Raised when the shopper has no row in the users table."""

    def __init__(self, user_id: str):
        super().__init__(
            message="Profile not found",
            code="PROFILE_NOT_FOUND",
            status_code=404,
            suggestion="Sign up again to create your profile",
            details={"user_id": user_id},
        )


# =============================================================================
# Upstream Exceptions
# =============================================================================

class CatalogUnavailableError(BoxCurateException):
    """Raised when the catalog cannot be read from Supabase."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Error loading catalog: {error}",
            code="CATALOG_UNAVAILABLE",
            status_code=502,
            suggestion="Try again later",
            details={"error": error},
        )


class OrderPersistenceError(BoxCurateException):
    """Raised when order, cart or purchase records cannot be read or written."""

    def __init__(
        self,
        error: str,
        context: str = "Error adding to cart",
        suggestion: str = "Your selection was kept. Try again later",
    ):
        super().__init__(
            message=f"{context}: {error}",
            code="ORDER_PERSISTENCE_FAILED",
            status_code=502,
            suggestion=suggestion,
            details={"error": error},
        )


class ProfileUnavailableError(BoxCurateException):
    """Raised when the users row cannot be read or updated."""

    def __init__(self, error: str, context: str = "Error updating profile"):
        super().__init__(
            message=f"{context}: {error}",
            code="PROFILE_UNAVAILABLE",
            status_code=502,
            suggestion="Try again later",
            details={"error": error},
        )


class LocalStoreError(BoxCurateException):
    """Raised when the local draft store cannot be read or written."""

    def __init__(self, path: str, error: str):
        super().__init__(
            message=f"Error accessing saved curations: {error}",
            code="LOCAL_STORE_ERROR",
            status_code=500,
            details={"path": path, "error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def boxcurate_exception_handler(
    request: Request,
    exc: BoxCurateException
) -> JSONResponse:
    """
    Convert BoxCurateException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
