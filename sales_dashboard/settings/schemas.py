"""
Schemas for settings endpoints.
"""
from pydantic import BaseModel, Field

from sales_dashboard.common.schemas import JSendResponse
from sales_dashboard.transactions.constants import LOCAL_CURRENCY, PURCHASE_CURRENCY


class ExchangeRate(BaseModel):
    """Exchange rate currently in effect."""
    key: str = Field(..., description="Settings key the rate is read from")
    fromCurrency: str = PURCHASE_CURRENCY
    toCurrency: str = LOCAL_CURRENCY
    value: float = Field(..., description="Local-currency units per foreign-currency unit")


class ExchangeRateResponse(JSendResponse[ExchangeRate]):
    """Response model for the exchange rate."""
    pass
