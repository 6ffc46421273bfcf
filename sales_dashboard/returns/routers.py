"""
This module contains the FastAPI routers for the returns view.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Path, Query
from starlette import status

from sales_dashboard.common.live import LiveSnapshots, get_live_snapshots
from sales_dashboard.common.schemas import JSendResponse
from sales_dashboard.returns.schemas import (
    DepositPatch, DepositResponse, DepositUpdate, ReturnToggleResponse, ReturnsWeekResponse
)
from sales_dashboard.returns.services import (
    find_return, get_returns_week, parse_deposit, save_deposit, save_toggle, toggle_returned
)

router = APIRouter()


@router.get("", response_model=ReturnsWeekResponse)
async def list_week_returns(
        week_offset: int = Query(0, description="Weeks relative to the current week (negative = past)"),
        live: LiveSnapshots = Depends(get_live_snapshots)
):
    """
    Get the returns created in one week with the total/returned/remaining counter.
    """
    try:
        data = await get_returns_week(list(live.current().returns), week_offset=week_offset)
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


@router.post("/{return_id}/toggle", response_model=ReturnToggleResponse)
async def toggle_return_status(
        background_tasks: BackgroundTasks,
        return_id: str = Path(..., description="Return record ID (same as the sale ID)"),
        live: LiveSnapshots = Depends(get_live_snapshots)
):
    """
    Flip the returned flag of a return record.

    The computed patch is returned immediately; the write runs in the
    background and a failed write is only logged.
    """
    try:
        record = find_return(list(live.current().returns), return_id)
        patch = toggle_returned(record)
        background_tasks.add_task(save_toggle, return_id, patch)
        return JSendResponse.success(patch)
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


@router.put("/{return_id}/deposit", response_model=DepositResponse)
async def update_return_deposit(
        deposit: DepositUpdate,
        background_tasks: BackgroundTasks,
        return_id: str = Path(..., description="Return record ID (same as the sale ID)"),
        live: LiveSnapshots = Depends(get_live_snapshots)
):
    """
    Save the deposit (CZK) of a return record.

    Input such as ``"1,5"`` or ``"1.5"`` is accepted; anything unparseable is
    saved as 0. The write runs in the background and a failed write is only logged.
    """
    try:
        find_return(list(live.current().returns), return_id)
        patch = DepositPatch(depositCzk=parse_deposit(deposit.value))
        background_tasks.add_task(save_deposit, return_id, patch.depositCzk)
        return JSendResponse.success(patch)
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
