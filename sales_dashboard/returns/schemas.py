"""
Schemas for the returns view ("Vrácení starých motorů").
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from firebase_admin import firestore
from pydantic import BaseModel, Field, field_validator

from sales_dashboard.common.dates import coerce_datetime
from sales_dashboard.common.schemas import JSendResponse, WeekInfo
from sales_dashboard.common.utils import to_number


class ReturnRecord(BaseModel):
    """
    A sold item pending return. Its document id equals the originating sale id.
    """
    id: str
    transactionId: Optional[str] = None
    itemName: str = ""
    note: str = ""
    seller: str = ""
    sellingPriceCzk: float = 0
    deliveryCity: str = ""
    customerAddress: str = ""
    customerContact: str = ""
    customerPhone2: str = ""
    depositCzk: float = 0
    returned: bool = False
    returnedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None

    @field_validator('sellingPriceCzk', 'depositCzk', mode='before')
    @classmethod
    def parse_amount(cls, value):
        return to_number(value)

    @field_validator('returned', mode='before')
    @classmethod
    def parse_returned(cls, value):
        return bool(value)

    @field_validator('itemName', 'note', 'seller', 'deliveryCity', 'customerAddress',
                     'customerContact', 'customerPhone2', mode='before')
    @classmethod
    def parse_text(cls, value):
        return "" if value is None else str(value)

    @field_validator('transactionId', mode='before')
    @classmethod
    def parse_transaction_id(cls, value):
        return None if value is None else str(value)

    @field_validator('returnedAt', 'createdAt', mode='before')
    @classmethod
    def parse_timestamp(cls, value):
        return coerce_datetime(value)


class ReturnRow(ReturnRecord):
    """Return record as shown in the table, with display formatting applied."""
    sellingPriceDisplay: str = ""
    phoneDisplay: List[str] = Field(default_factory=list)
    statusLabel: str = ""


class ReturnsCounter(BaseModel):
    """The three counter cells above the returns table."""
    total: int = Field(..., description="Returns in the week")
    returned: int = Field(..., description="Already returned")
    remaining: int = Field(..., description="Still to be returned")


class ReturnsWeekData(BaseModel):
    """Everything the returns view shows for one week."""
    week: WeekInfo
    counter: ReturnsCounter
    items: List[ReturnRow]


class ReturnTogglePatch(BaseModel):
    """Field changes produced by toggling the returned flag."""
    returned: bool
    returnedAt: Optional[datetime] = None

    def to_firestore(self) -> Dict[str, Any]:
        """
        Document update. The stored returnedAt is the server time; clearing it
        removes the field.
        """
        return {
            "returned": self.returned,
            "returnedAt": firestore.firestore.SERVER_TIMESTAMP if self.returned else firestore.firestore.DELETE_FIELD
        }


class DepositUpdate(BaseModel):
    """Raw deposit input as typed into the table cell."""
    value: Union[str, float, None] = None


class DepositPatch(BaseModel):
    """Parsed deposit that is written to the return record."""
    depositCzk: float


class ReturnsWeekResponse(JSendResponse[ReturnsWeekData]):
    """Response model for the weekly returns view."""
    pass


class ReturnRecordResponse(JSendResponse[ReturnRecord]):
    """Response model for add-to-returns."""
    pass


class ReturnToggleResponse(JSendResponse[ReturnTogglePatch]):
    """Response model for the returned toggle."""
    pass


class DepositResponse(JSendResponse[DepositPatch]):
    """Response model for saving a deposit."""
    pass
