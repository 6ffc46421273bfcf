import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from sales_dashboard.common.config import get_settings
from sales_dashboard.common.firebase import get_firestore_client, init_firebase
from sales_dashboard.common.live import LiveSnapshots

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Connect to Firebase and keep live snapshots of the dashboard collections
    for the lifetime of the application.
    """
    init_firebase(settings)
    with LiveSnapshots(
        get_firestore_client(),
        app_id=settings.app_id,
        default_exchange_rate=settings.default_exchange_rate
    ) as live:
        app.state.live = live
        logger.info("Sales dashboard started for namespace '%s'", settings.app_id)
        yield
    logger.info("Sales dashboard stopped")


app = FastAPI(title="Sales Dashboard API", lifespan=lifespan)

from sales_dashboard.transactions.routers import router as transactions_router
from sales_dashboard.returns.routers import router as returns_router
from sales_dashboard.history.routers import router as history_router
from sales_dashboard.settings.routers import router as settings_router

app.include_router(transactions_router, prefix="/transactions", tags=["transactions"])
app.include_router(returns_router, prefix="/returns", tags=["returns"])
app.include_router(history_router, prefix="/history", tags=["history"])
app.include_router(settings_router, prefix="/settings", tags=["settings"])


@app.get("/")
def read_root():
    """Root endpoint for the API.
    Returns:
        A simple message indicating the API is running.
    """
    return {"message": "Sales Dashboard API"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
