"""
Settings routers.
"""

from fastapi import APIRouter, Depends

from sales_dashboard.common.live import LiveSnapshots, get_live_snapshots
from sales_dashboard.common.schemas import JSendResponse
from sales_dashboard.settings.schemas import ExchangeRate, ExchangeRateResponse
from sales_dashboard.settings.services import EXCHANGE_RATE_KEY

router = APIRouter()


@router.get("/exchange-rate", response_model=ExchangeRateResponse)
async def get_exchange_rate(live: LiveSnapshots = Depends(get_live_snapshots)):
    """Get the PLN -> CZK rate used for purchase prices."""
    rate = ExchangeRate(key=EXCHANGE_RATE_KEY, value=live.current().exchange_rate)
    return JSendResponse.success(rate)
