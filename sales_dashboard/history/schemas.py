"""
Schemas for the activity log.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from sales_dashboard.common.dates import coerce_datetime
from sales_dashboard.common.schemas import JSendResponse, PaginationResponse


class HistoryEntry(BaseModel):
    """One append-only log entry."""
    id: str
    action: str = ""
    docId: Optional[str] = None
    details: str = ""
    timestamp: Optional[datetime] = None

    @field_validator('action', 'details', mode='before')
    @classmethod
    def parse_text(cls, value):
        return "" if value is None else str(value)

    @field_validator('docId', mode='before')
    @classmethod
    def parse_doc_id(cls, value):
        return None if value is None else str(value)

    @field_validator('timestamp', mode='before')
    @classmethod
    def parse_timestamp(cls, value):
        return coerce_datetime(value)


class HistoryData(PaginationResponse[HistoryEntry]):
    """
    Represents a paginated list of history entries.
    """
    pass


class HistoryResponse(JSendResponse[HistoryData]):
    """Response model for the history log."""
    pass
