"""Centralized error handling for the tracker API."""

from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.services.custom_dates import CustomDateError
from src.services.tracker_service import RefreshInProgressError


class TrackerError:
    """Standard error codes for the tracker API."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_DATE = "INVALID_DATE"
    INVALID_PERCENTAGE = "INVALID_PERCENTAGE"
    NOT_FOUND = "NOT_FOUND"
    REFRESH_IN_PROGRESS = "REFRESH_IN_PROGRESS"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse:
    """Standardized error response format."""

    def __init__(
        self,
        error_code: str,
        message: str,
        details: dict[str, Any] | list[str] | None = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        """
        Initialize error response.

        Args:
            error_code: Standard error code from TrackerError
            message: Human-readable error message
            details: Additional error details (field-specific errors, etc.)
            status_code: HTTP status code
        """
        self.error_code = error_code
        self.message = message
        self.details = details
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        response = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(status_code=self.status_code, detail=self.to_dict())

    def to_json_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


def create_validation_error_response(errors: list[dict[str, Any]]) -> ErrorResponse:
    """
    Create standardized validation error response from request validation errors.

    Args:
        errors: List of validation errors from Pydantic

    Returns:
        ErrorResponse with field-specific validation errors
    """
    field_errors = {}
    for error in errors:
        field_path = ".".join(str(loc) for loc in error["loc"])
        field_errors[field_path] = error["msg"]

    return ErrorResponse(
        error_code=TrackerError.VALIDATION_ERROR,
        message="Validation failed for one or more fields",
        details=field_errors,
    )


def create_not_found_error(resource: str, identifier: str) -> ErrorResponse:
    return ErrorResponse(
        error_code=TrackerError.NOT_FOUND,
        message=f"Unknown {resource}: {identifier}",
        details={resource: identifier},
        status_code=status.HTTP_404_NOT_FOUND,
    )


def create_percentage_error(message: str) -> ErrorResponse:
    return ErrorResponse(
        error_code=TrackerError.INVALID_PERCENTAGE,
        message=message,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI validation errors with standardized format."""
    return create_validation_error_response(exc.errors()).to_json_response()


async def custom_date_exception_handler(request: Request, exc: CustomDateError) -> JSONResponse:
    """Reject malformed or duplicate custom dates."""
    return ErrorResponse(
        error_code=TrackerError.INVALID_DATE,
        message=str(exc),
    ).to_json_response()


async def refresh_in_progress_handler(
    request: Request, exc: RefreshInProgressError
) -> JSONResponse:
    return ErrorResponse(
        error_code=TrackerError.REFRESH_IN_PROGRESS,
        message=str(exc),
        status_code=status.HTTP_409_CONFLICT,
    ).to_json_response()


def register_error_handlers(app: FastAPI) -> None:
    """Attach the tracker exception handlers to an application."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(CustomDateError, custom_date_exception_handler)
    app.add_exception_handler(RefreshInProgressError, refresh_in_progress_handler)
