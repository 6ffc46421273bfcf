"""
History log routers.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette import status

from sales_dashboard.common.live import LiveSnapshots, get_live_snapshots
from sales_dashboard.common.schemas import JSendResponse
from sales_dashboard.history.schemas import HistoryResponse
from sales_dashboard.history.services import list_history

router = APIRouter()


@router.get("", response_model=HistoryResponse)
async def get_history(
        page: int = Query(1, ge=1, description="Page number"),
        size: int = Query(50, ge=1, le=500, description="Items per page"),
        live: LiveSnapshots = Depends(get_live_snapshots)
):
    """
    Get the activity log, newest entries first.
    """
    try:
        data = list_history(list(live.current().history), page=page, size=size)
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
