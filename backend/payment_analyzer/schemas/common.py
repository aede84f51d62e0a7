"""
Common schemas used across the application.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Error body produced for UserFacingError and domain errors."""

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "code": "INVALID_FILES",
                "message": 'File "runsheet.pdf" is empty',
                "stage": "validation",
            }
        },
    )

    code: str = Field(..., description="Error code for client handling")
    message: str = Field(..., description="Human readable message")
    stage: Optional[str] = Field(None, description="Pipeline stage that failed")
    details: Optional[Dict[str, Any]] = Field(None, description="Structured details")
