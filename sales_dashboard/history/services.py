"""
Services for the append-only activity log.
"""
import logging
from typing import Any, Dict, List

from firebase_admin import firestore

from sales_dashboard.common.dates import coerce_datetime
from sales_dashboard.common.firebase import HISTORY_COLLECTION, collection_path, get_firestore_client
from sales_dashboard.history.schemas import HistoryData, HistoryEntry

logger = logging.getLogger(__name__)


async def append_history(action: str, doc_id: str, details: str) -> str:
    """
    Append an entry to the history log.

    Args:
        action: Short label of what happened
        doc_id: ID of the affected document
        details: Free-text description

    Returns:
        str: ID of the new history entry
    """
    db = get_firestore_client()
    _, entry_ref = db.collection(collection_path(HISTORY_COLLECTION)).add({
        "action": action,
        "docId": doc_id,
        "details": details,
        "timestamp": firestore.firestore.SERVER_TIMESTAMP,
    })
    logger.info("History: %s (%s)", action, doc_id)
    return entry_ref.id


def list_history(entries: List[Dict[str, Any]], page: int = 1, size: int = 50) -> HistoryData:
    """
    Order history entries newest first and return one page.

    Entries still waiting for their server timestamp sort first.
    """
    def newest_first(entry):
        moment = coerce_datetime(entry.get("timestamp"))
        return (1, 0.0) if moment is None else (0, moment.timestamp())

    ordered = sorted(entries, key=newest_first, reverse=True)
    items = [HistoryEntry(**entry) for entry in ordered]
    return HistoryData.from_list(items, page=page, size=size)
