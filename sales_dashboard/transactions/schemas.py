"""
Schemas for the sales (transactions) view.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from sales_dashboard.common.schemas import JSendResponse, WeekInfo


class ProfitSource(str, Enum):
    """Where a record's net profit comes from."""
    STORED = "stored"  # netProfitCzk saved on the record
    DERIVED = "derived"  # selling price minus converted purchase price


class SaleRow(BaseModel):
    """One row of the weekly sales table."""
    id: str
    saleDate: Optional[datetime] = None
    itemName: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    note: Optional[str] = None
    seller: Optional[str] = None
    supplier: Optional[str] = None
    purchasePriceCzk: float = Field(..., description="Purchase price converted with the exchange rate")
    sellingPriceCzk: float
    profitCzk: float
    profitSource: ProfitSource
    deliveryCity: Optional[str] = None
    customerName: Optional[str] = None
    customerAddress: Optional[str] = None
    customerContact: str = ""
    customerPhone2: str = ""

    @field_validator('itemName', 'brand', 'model', 'note', 'seller', 'supplier',
                     'deliveryCity', 'customerName', 'customerAddress', mode='before')
    @classmethod
    def parse_text(cls, value):
        # Stored values may be numbers
        return None if value is None else str(value)


class SummaryDisplay(BaseModel):
    """Summary values formatted as whole CZK for the four summary cells."""
    purchase: str
    selling: str
    profit: str


class SalesSummary(BaseModel):
    """Totals over the filtered sales of one week."""
    purchaseTotal: float = Field(..., description="Sum of purchase prices converted to CZK")
    sellingTotal: float = Field(..., description="Sum of selling prices in CZK")
    profitTotal: float = Field(..., description="Sum of net profits in CZK")
    count: int = Field(..., description="Number of records")
    display: Optional[SummaryDisplay] = None


class SalesWeekData(BaseModel):
    """Everything the sales view shows for one week."""
    week: WeekInfo
    search: str = ""
    exchangeRate: float
    summary: SalesSummary
    items: List[SaleRow]


class SalesWeekResponse(JSendResponse[SalesWeekData]):
    """Response model for the weekly sales view."""
    pass
