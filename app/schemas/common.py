# app/schemas/common.py
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every endpoint"""
    success: bool = Field(..., description="Whether the request succeeded")
    data: Optional[T] = Field(None, description="Payload, null on failure")
    message: Optional[str] = Field(None, description="Human readable outcome")


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    return {"success": True, "data": data, "message": message}


def fail(message: str, data: Any = None) -> dict:
    return {"success": False, "data": data, "message": message}
