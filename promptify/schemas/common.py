"""Common/shared schemas."""

import math
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlmodel import SQLModel

T = TypeVar("T")


class Message(SQLModel):
    """Generic message response."""
    message: str


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope shared by every endpoint."""
    success: bool = True
    message: str | None = None
    data: T | None = None


class Pagination(SQLModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


def ok(data: Any = None, message: str | None = None) -> dict[str, Any]:
    return {"success": True, "message": message, "data": data}
