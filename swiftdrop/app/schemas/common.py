"""
Shared Pydantic schema building blocks.

The public API speaks camelCase (trackingId, statusLogs, ...) while the
Python side stays snake_case.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Generic, Literal, TypeVar

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases, accepting either form on input."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(BaseModel, Generic[T]):
    """Success envelope: {"status": "success", "data": ...}."""
    status: Literal["success"] = "success"
    data: T


class ErrorResponse(BaseModel):
    """Failure envelope: {"status": "fail" | "error", "message": ...}."""
    status: Literal["fail", "error"]
    message: str


# Documented on every router so the OpenAPI schema shows the failure envelope
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    401: {"model": ErrorResponse, "description": "Missing, invalid or revoked token"},
    403: {"model": ErrorResponse, "description": "Role or ownership check failed"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
    500: {"model": ErrorResponse, "description": "Server error"},
}
