"""
Common response models.

Error schema shared by every route's exception handlers.

Dependencies: pydantic
System role: Common API response structures
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error response schema."""

    success: bool = False
    error: str = Field(description="Error message")
    error_type: str = Field(description="Exception class name")
    details: dict | None = Field(default=None, description="Additional error context")
