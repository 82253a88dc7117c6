"""
Error handling for the API

Exception handlers turn exceptions raised while serving a request into
ErrorResponse JSON:
- RequestValidationError: malformed request body (422)
- DomainError: API-level business errors
- StillpointError: session core errors, mapped onto DomainError
- anything else: 500
"""

import uuid
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from stillpoint.api.schemas.error import ErrorResponse, ErrorDetail, ValidationErrorResponse
from stillpoint.models.enums import LogCategory
from stillpoint.models.errors import (
    StillpointError,
    InvalidDurationError,
    InvalidTransitionError,
    TimerUnavailableError,
)
from stillpoint.utils.logger import get_logger

log = get_logger().for_category(LogCategory.API)


class DomainError(Exception):
    """Base class for errors returned to API clients"""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
        status_code: int = 400
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)


class UnknownSceneError(DomainError):
    """Scene is not one of the configured scenes"""

    def __init__(self, scene: str, valid_scenes: list):
        super().__init__(
            code="UNKNOWN_SCENE",
            message=f"Scene '{scene}' is not available",
            details={"scene": scene, "valid_scenes": valid_scenes},
            status_code=422
        )


def to_domain_error(exc: StillpointError) -> DomainError:
    """Map a session core exception onto its API error."""
    if isinstance(exc, InvalidDurationError):
        return DomainError(
            code="INVALID_DURATION",
            message=str(exc),
            details={"value": str(exc.duration_ms), "reason": exc.reason},
            status_code=422
        )
    if isinstance(exc, InvalidTransitionError):
        return DomainError(
            code="INVALID_TRANSITION",
            message=str(exc),
            details={"command": exc.command, "state": exc.state.name},
            status_code=409
        )
    if isinstance(exc, TimerUnavailableError):
        return DomainError(code="TIMER_UNAVAILABLE", message=str(exc), status_code=503)
    return DomainError(code="SESSION_ERROR", message=str(exc), status_code=400)


def _error_json(status_code: int, response) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app"""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        request_id = str(uuid.uuid4())
        errors = exc.errors()
        log.warn("Validation error", request_id=request_id, error_count=len(errors))

        validation_errors = [
            {
                "field": ".".join(str(x) for x in error["loc"][1:]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in errors
        ]

        response = ValidationErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details={"error_count": len(errors)},
            ),
            validation_errors=validation_errors,
            request_id=request_id
        )
        return _error_json(status.HTTP_422_UNPROCESSABLE_ENTITY, response)

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError):
        request_id = str(uuid.uuid4())
        log.warn(f"Domain error: {exc.code} - {exc.message}", request_id=request_id)

        response = ErrorResponse(
            error=ErrorDetail(code=exc.code, message=exc.message, details=exc.details),
            request_id=request_id
        )
        return _error_json(exc.status_code, response)

    @app.exception_handler(StillpointError)
    async def session_exception_handler(request: Request, exc: StillpointError):
        return await domain_exception_handler(request, to_domain_error(exc))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        request_id = str(uuid.uuid4())
        log.error(
            f"Unexpected error: {type(exc).__name__}: {exc}",
            request_id=request_id
        )

        response = ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred. Please try again.",
                details={"request_id": request_id},
            ),
            request_id=request_id
        )
        return _error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, response)
