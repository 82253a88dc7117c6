"""
Error schemas - standardized error response format
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorDetail(BaseModel):
    """Detailed error information"""
    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional context (field names, valid values, etc.)"
    )
    timestamp: datetime = Field(default_factory=_utcnow, description="When the error occurred")


class ErrorResponse(BaseModel):
    """API error response, used by every error the API returns"""
    error: ErrorDetail = Field(description="Error information")
    request_id: Optional[str] = Field(None, description="Request ID for logging/debugging")

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": {
                    "code": "INVALID_TRANSITION",
                    "message": "Cannot pause while session is IDLE",
                    "details": {"command": "pause", "state": "IDLE"},
                    "timestamp": "2026-01-12T07:30:00Z"
                },
                "request_id": "3f0c1b6e-8a8e-4c4b-9d0e-2b4f3f1d9a11"
            }
        }
    }


class ValidationErrorResponse(BaseModel):
    """Validation error - request body did not match the schema"""
    error: ErrorDetail = Field(description="Error information")
    validation_errors: list[Dict[str, Any]] = Field(description="Per-field validation errors")
    request_id: Optional[str] = Field(None, description="Request ID for logging/debugging")
