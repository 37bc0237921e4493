"""Custom exceptions and FastAPI exception handlers.

Implements RFC 7807 Problem Details for machine-readable error responses.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from factory_seeder.core.logging import get_logger
from factory_seeder.core.problem_details import (
    ERROR_TYPES,
    ProblemDetailResponse,
    problem_response,
)

logger = get_logger(__name__)


# =============================================================================
# Exception Classes
# =============================================================================


class FactorySeederError(Exception):
    """Base exception for FactorySeeder errors.

    All application-specific exceptions should inherit from this class.
    Each exception type maps to an RFC 7807 problem type URI.
    """

    # Default error type URI (override in subclasses)
    error_type_uri: str = ERROR_TYPES["INTERNAL_ERROR"]

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application error.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            status_code: HTTP status code.
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    @property
    def title(self) -> str:
        """RFC 7807 title - short summary of problem type."""
        return self.code.replace("_", " ").title()

    def problem_errors(self) -> list[dict[str, Any]] | None:
        """Structured per-item errors for the problem response, if any."""
        return None


class NotFoundError(FactorySeederError):
    """Resource not found error."""

    error_type_uri: str = ERROR_TYPES["NOT_FOUND"]

    def __init__(
        self,
        message: str = "Resource not found",
        code: str = "NOT_FOUND",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            status_code=404,
            details=details,
        )


class FactoryNotFoundError(NotFoundError):
    """No factory is registered under the requested name.

    Aborts the whole operation; nothing is generated.
    """

    error_type_uri: str = ERROR_TYPES["FACTORY_NOT_FOUND"]

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        available = available or []
        message = f"Factory '{name}' not found"
        if available:
            message += f". Available factories: {', '.join(available[:10])}"
        super().__init__(
            message=message,
            code="FACTORY_NOT_FOUND",
            details={"factory": name, "available": available[:10]},
        )
        self.name = name


class SeedNotFoundError(NotFoundError):
    """No custom seed is registered under the requested name."""

    error_type_uri: str = ERROR_TYPES["SEED_NOT_FOUND"]

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        available = available or []
        message = f"Seed '{name}' not found"
        if available:
            message += f". Available seeds: {', '.join(available)}"
        super().__init__(
            message=message,
            code="SEED_NOT_FOUND",
            details={"seed": name, "available": available},
        )
        self.name = name


class ValidationError(FactorySeederError):
    """Input validation error."""

    error_type_uri: str = ERROR_TYPES["VALIDATION_ERROR"]

    def __init__(
        self,
        message: str = "Validation failed",
        code: str = "VALIDATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            status_code=422,
            details=details,
        )


class ConflictError(FactorySeederError):
    """Operation conflicts with the shape of the target."""

    error_type_uri: str = ERROR_TYPES["CONFLICT"]

    def __init__(
        self,
        message: str = "Resource conflict",
        code: str = "CONFLICT",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            details=details,
        )


class AssociationAttributeConflictError(ConflictError):
    """Attributes name collection associations and the policy forbids stripping them."""

    error_type_uri: str = ERROR_TYPES["ASSOCIATION_ATTRIBUTE_CONFLICT"]

    def __init__(self, factory: str, keys: list[str]) -> None:
        super().__init__(
            message=(
                f"Attributes {', '.join(keys)} of factory '{factory}' name collection "
                "associations and cannot be assigned as plain values"
            ),
            code="ASSOCIATION_ATTRIBUTE_CONFLICT",
            details={"factory": factory, "keys": keys},
        )
        self.keys = keys


class BadRequestError(FactorySeederError):
    """Bad request error (unknown trait, malformed attributes, etc.)."""

    error_type_uri: str = ERROR_TYPES["BAD_REQUEST"]

    def __init__(
        self,
        message: str = "Bad request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="BAD_REQUEST",
            status_code=400,
            details=details,
        )


class ForbiddenError(FactorySeederError):
    """Operation not allowed in the current environment."""

    error_type_uri: str = ERROR_TYPES["FORBIDDEN"]

    def __init__(
        self,
        message: str = "Forbidden",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="FORBIDDEN",
            status_code=403,
            details=details,
        )


class GenerationFailedError(FactorySeederError):
    """Unexpected failure raised by the factory library outside a single record."""

    error_type_uri: str = ERROR_TYPES["GENERATION_FAILED"]

    def __init__(
        self,
        message: str = "Generation failed",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="GENERATION_FAILED",
            status_code=500,
            details=details,
        )


# =============================================================================
# Exception Handlers (RFC 7807)
# =============================================================================


async def factory_seeder_exception_handler(
    _request: Request,
    exc: FactorySeederError,
) -> ProblemDetailResponse:
    """Handle FactorySeederError exceptions with RFC 7807 Problem Details.

    Args:
        _request: FastAPI request object.
        exc: The raised exception.

    Returns:
        RFC 7807 Problem Detail response.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "app.error_handled",
        error=exc.message,
        error_type=type(exc).__name__,
        error_code=exc.code,
        status_code=exc.status_code,
        details=exc.details,
    )

    return problem_response(
        status=exc.status_code,
        title=exc.title,
        detail=exc.message,
        error_code=exc.code,
        errors=exc.problem_errors(),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> ProblemDetailResponse:
    """Handle Pydantic validation errors with RFC 7807 Problem Details.

    Args:
        request: FastAPI request object.
        exc: Pydantic validation error.

    Returns:
        RFC 7807 Problem Detail response with field-level errors.
    """
    field_errors: list[dict[str, str]] = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field_path = ".".join(str(part) for part in loc if part != "body")
        field_errors.append(
            {
                "field": field_path,
                "message": str(error.get("msg", "Validation failed")),
                "type": str(error.get("type", "unknown")),
            }
        )

    logger.warning(
        "app.validation_error",
        error_count=len(field_errors),
        path=str(request.url.path),
        fields=[e["field"] for e in field_errors],
    )

    return problem_response(
        status=422,
        title="Validation Error",
        detail=f"Request validation failed with {len(field_errors)} error(s). "
        "Check the 'errors' field for details.",
        error_code="VALIDATION_ERROR",
        errors=field_errors,
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> ProblemDetailResponse:
    """Handle unexpected exceptions with RFC 7807 Problem Details.

    Args:
        request: FastAPI request object.
        exc: The raised exception.

    Returns:
        RFC 7807 Problem Detail response.
    """
    logger.error(
        "app.unhandled_error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=str(request.url.path),
        exc_info=True,
    )

    return problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred. Check the server log for the request_id.",
        error_code="INTERNAL_ERROR",
    )


# =============================================================================
# Handler Registration
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.add_exception_handler(FactorySeederError, factory_seeder_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
