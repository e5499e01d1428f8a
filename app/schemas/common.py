"""
Error envelope shared by every endpoint, used in the OpenAPI `responses`
declarations of the routers.
"""
from typing import Any, Optional

from pydantic import BaseModel, Field


class FieldError(BaseModel):
    """One entry of `details.errors` in a VALIDATION_ERROR response."""
    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    code: str = Field(examples=["STORE_WRITE_ERROR"])
    message: str
    details: Optional[dict[str, Any]] = None


STORE_UNAVAILABLE = {
    "model": ErrorResponse,
    "description": "Store unavailable; nothing was written.",
}
VALIDATION_FAILED = {
    "model": ErrorResponse,
    "description": "Validation error (`details.errors` lists FieldError items).",
}
