"""Application error taxonomy and API response helpers."""

from typing import Any, Dict

from fastapi import HTTPException, status


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class ValidationError(AppError):
    """Input rejected before any write (amount, percentages, resident selection)."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, "validation_error", status.HTTP_400_BAD_REQUEST)


class NotFoundError(AppError):
    """Requested invoice, split or property does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found", status.HTTP_404_NOT_FOUND)


class PersistenceError(AppError):
    """Backing store call failed. Completed writes are not rolled back."""

    def __init__(
        self,
        message: str = "Backing store operation failed",
        code: str = "persistence_error",
        http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    ):
        super().__init__(message, code, http_status)


class ConcurrentUpdateError(PersistenceError):
    """Row was modified by another writer since it was read."""

    def __init__(self, message: str = "Record was modified concurrently"):
        super().__init__(message, "concurrent_update", status.HTTP_409_CONFLICT)


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }


def raise_app_error(error: AppError) -> None:
    """Raise an HTTPException from an AppError."""
    raise HTTPException(
        status_code=error.http_status,
        detail=error_response(error),
    ) from error
