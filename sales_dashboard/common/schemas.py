"""
This module defines common Pydantic models used across multiple dashboard areas.
These models represent shared data structures to ensure consistency throughout the application.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, TypeVar, Generic, List, Any

from pydantic import BaseModel, Field


class JSendStatus(str, Enum):
    """
    JSend status options.
    """
    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"


T = TypeVar('T')


class PaginationResponse(BaseModel, Generic[T]):
    """
    A generic model for paginated responses.
    """
    items: List[T]
    total: int
    page: int
    size: int
    pages: int

    @classmethod
    def from_list(cls, items: List[Any], page: int, size: int) -> 'PaginationResponse':
        """Slice an already ordered list into one page."""
        total = len(items)
        pages = (total + size - 1) // size if size > 0 else 0
        start_index = (page - 1) * size
        return cls(
            items=items[start_index:start_index + size],
            total=total,
            page=page,
            size=size,
            pages=pages
        )


class WeekInfo(BaseModel):
    """
    The week window a dashboard view is showing.
    """
    offset: int = Field(..., description="Weeks relative to the current week (0 = this week)")
    start: datetime = Field(..., description="Monday 00:00 local time (inclusive)")
    end: datetime = Field(..., description="Following Monday 00:00 local time (exclusive)")
    label: str = Field(..., description="Human readable range, e.g. 06.01.2025 – 12.01.2025")


class JSendResponse(BaseModel, Generic[T]):
    """
    Base JSend response format as per https://github.com/omniti-labs/jsend
    """
    status: JSendStatus
    data: Optional[T] = None
    message: Optional[str] = None
    code: Optional[int] = None  # For error responses

    @classmethod
    def success(cls, data: Any = None, message: Optional[str] = None) -> 'JSendResponse':
        """Create a success response with data"""
        return cls(status=JSendStatus.SUCCESS, data=data, message=message)

    @classmethod
    def error(cls, message: str, code: Optional[int] = None, data: Any = None) -> 'JSendResponse':
        """Create an error response for system or unexpected errors"""
        return cls(status=JSendStatus.ERROR, message=message, code=code, data=data)
