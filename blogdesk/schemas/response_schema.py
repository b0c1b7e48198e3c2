"""Unified API response schemas."""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

NOT_PERSISTED = "Store unavailable, change not saved"


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Failure envelope shared by every exception handler."""

    success: Literal[False] = False
    error: ErrorDetail


class ApiResponse(BaseModel, Generic[T]):
    """Success response with status, message, and data (no code field)."""

    status: int = 200
    message: str = "Success"
    data: T | None = None


def success_response(data: T, status: int = 200, message: str = "Success") -> dict:
    """Build a success response dict for returning from endpoints."""
    return {"status": status, "message": message, "data": data}


def write_response(data: T, persisted: bool, status: int = 200) -> dict:
    """Success envelope for an admin write; flags writes the store dropped."""
    return success_response(
        data, status=status, message="Success" if persisted else NOT_PERSISTED
    )


def error_content(code: str, message: str) -> dict:
    """Serialized :class:`ErrorResponse` body."""
    return ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump()
