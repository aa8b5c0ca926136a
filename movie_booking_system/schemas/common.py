"""
Common schemas for API responses and error handling.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Schema for detailed error information."""

    error_code: str = Field(..., description="Error code for programmatic handling")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error context")
    suggestions: Optional[List[str]] = Field(None, description="Helpful suggestions for resolving the error")


class ErrorResponse(BaseModel):
    """Schema for API error responses."""

    error: ErrorDetail
    error_id: str
    timestamp: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": {
                        "error_code": "PRECONDITION_FAILED",
                        "message": "Select at least one seat",
                        "details": {"step": "seats"}
                    },
                    "error_id": "6f1c2d0e-8a53-4f0b-9d0a-2a7f3c1b9e11",
                    "timestamp": "2025-01-01T12:00:00+00:00"
                },
                {
                    "error": {
                        "error_code": "BOOKING_SUBMISSION_FAILED",
                        "message": "booking service error: POST /bookings returned 500",
                        "details": {"service_name": "booking", "status_code": 500},
                        "suggestions": ["Submit the payment again"]
                    },
                    "error_id": "0b9e7a43-54c1-4c2e-8f43-77d0c5a1f2aa",
                    "timestamp": "2025-01-01T12:00:00+00:00"
                }
            ]
        }
    }


class SuccessResponse(BaseModel):
    """Schema for simple success responses."""

    message: str = Field(..., description="Success message")
    data: Optional[Dict[str, Any]] = Field(None, description="Additional response data")
