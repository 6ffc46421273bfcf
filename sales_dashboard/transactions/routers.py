"""
This module contains the FastAPI routers for the sales (transactions) view.
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from starlette import status

from sales_dashboard.common.live import LiveSnapshots, get_live_snapshots
from sales_dashboard.common.schemas import JSendResponse
from sales_dashboard.returns.constants import ADDED_TO_RETURNS_MESSAGE
from sales_dashboard.returns.schemas import ReturnRecordResponse
from sales_dashboard.returns.services import add_to_returns
from sales_dashboard.transactions.schemas import SalesWeekResponse
from sales_dashboard.transactions.services import find_transaction, get_sales_week

router = APIRouter()


@router.get("", response_model=SalesWeekResponse)
async def list_week_sales(
        week_offset: int = Query(0, description="Weeks relative to the current week (negative = past)"),
        q: str = Query("", description="Search in item, brand, model, customer, address, seller, supplier, note"),
        live: LiveSnapshots = Depends(get_live_snapshots)
):
    """
    Get the sales of one week with the purchase/selling/profit summary.

    Args:
        week_offset: Which week to show; 0 is the current week
        q: Optional free-text filter
        live: Live snapshot state (injected)

    Returns:
        SalesWeekResponse with the week label, summary and rows (newest first)
    """
    try:
        snapshot = live.current()
        data = await get_sales_week(
            list(snapshot.transactions),
            snapshot.exchange_rate,
            week_offset=week_offset,
            search_term=q
        )
        return JSendResponse.success(data)
    except HTTPException as e:
        return JSendResponse.error(
            message=str(e.detail),
            code=e.status_code
        )
    except Exception as e:
        return JSendResponse.error(
            message=str(e),
            code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


@router.post("/{transaction_id}/returns", response_model=ReturnRecordResponse)
async def add_transaction_to_returns(
        transaction_id: str = Path(..., description="Sale record ID"),
        live: LiveSnapshots = Depends(get_live_snapshots)
):
    """
    Mark a sale for return.

    Creates the return record (or merges into the existing one) and logs the
    action to the history. Failures are reported back in the error envelope.
    """
    try:
        sale = find_transaction(list(live.current().transactions), transaction_id)
        record = await add_to_returns(sale)
        return JSendResponse.success(record, message=ADDED_TO_RETURNS_MESSAGE)
    except HTTPException as e:
        return JSendResponse.error(
            message=str(e.detail),
            code=e.status_code
        )
    except Exception as e:
        return JSendResponse.error(
            message=str(e),
            code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
