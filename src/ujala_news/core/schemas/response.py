"""
Response envelopes shared by every router.
"""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PageInfo(BaseModel):
    """
    Pagination block returned next to list data.

    >>> PageInfo.build(total=45, page=2, limit=20).pages
    3
    """

    total: int = Field(..., description="Total number of items across all pages")
    page: int = Field(default=1, description="1-indexed page number")
    pages: int = Field(default=0, description="Number of pages")
    limit: int = Field(default=20, description="Maximum items per page")

    @classmethod
    def build(cls, *, total: int, page: int, limit: int) -> "PageInfo":
        return cls(total=total, page=page, limit=limit, pages=math.ceil(total / limit))


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope for successful responses.

    Example:
        >>> ApiResponse[dict](data={"id": 1}, source="database").model_dump(
        ...     exclude_none=True
        ... )
        {'success': True, 'data': {'id': 1}, 'source': 'database'}
    """

    model_config = ConfigDict(from_attributes=True)

    success: bool = True
    data: T | None = None
    message: str | None = None
    source: str | None = None
    pagination: PageInfo | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: str | None = None
    hint: str | None = None
