"""
Custom exception hierarchy for the Craving Insight API.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

Store failures (read / write) are normally caught inside the service
layer and replaced by a documented default. Only writes let them reach
the HTTP layer, where they render as a 503 envelope.
"""
from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from app.schemas.common import FieldError


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class CravingAPIException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class StoreReadError(CravingAPIException):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "STORE_READ_ERROR"

    def __init__(self, key: str, reason: str = ""):
        super().__init__(
            message=f"Could not read '{key}' from the event store.",
            details={"key": key, "reason": reason} if reason else {"key": key},
        )


class StoreWriteError(CravingAPIException):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "STORE_WRITE_ERROR"

    def __init__(self, key: str, reason: str = ""):
        super().__init__(
            message=f"Could not write '{key}' to the event store.",
            details={"key": key, "reason": reason} if reason else {"key": key},
        )


class EventValidationError(CravingAPIException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "EVENT_VALIDATION_ERROR"

    def __init__(self, field: str, value: Any):
        super().__init__(
            message=f"Invalid value for '{field}': {value!r}.",
            details={"field": field, "value": str(value)},
        )


class UnknownStrategyError(CravingAPIException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "UNKNOWN_STRATEGY"

    def __init__(self, strategy_id: str):
        super().__init__(
            message=f"Strategy '{strategy_id}' does not exist.",
            details={"strategy_id": strategy_id},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def craving_exception_handler(
    request: Request, exc: CravingAPIException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append(FieldError(
            field=".".join(str(loc) for loc in error["loc"] if loc != "body"),
            message=error["msg"],
            type=error["type"],
        ).model_dump())
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
