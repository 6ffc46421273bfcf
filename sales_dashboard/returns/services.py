"""
Services for the returns view: weekly filtering, the returned toggle, deposits
and the add-to-returns upsert.
"""
import logging
import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException, status
from firebase_admin import firestore

from sales_dashboard.common.config import get_settings
from sales_dashboard.common.dates import WeekWindow, coerce_datetime, week_window
from sales_dashboard.common.firebase import RETURNS_COLLECTION, collection_path, get_firestore_client
from sales_dashboard.common.utils import format_currency_cz0, format_phone, to_number
from sales_dashboard.history.services import append_history
from sales_dashboard.returns.constants import (
    ADDED_TO_RETURNS_ACTION, ADDED_TO_RETURNS_DETAILS, ADD_TO_RETURNS_FAILED_MESSAGE,
    RETURN_STATUS_LABELS
)
from sales_dashboard.returns.schemas import (
    ReturnRecord, ReturnRow, ReturnsCounter, ReturnsWeekData, ReturnTogglePatch
)
from sales_dashboard.transactions.constants import RETURN_SNAPSHOT_FIELDS, SELLING_PRICE_FIELD
from sales_dashboard.transactions.services import week_info

logger = logging.getLogger(__name__)


def return_effective_date(record: Dict[str, Any], tz=None) -> Optional[datetime]:
    """When a return was created; falls back to the sale date."""
    created_at = coerce_datetime(record.get("createdAt"), tz)
    if created_at is not None:
        return created_at
    return coerce_datetime(record.get("saleDate"), tz)


def filter_returns(records: Iterable[Dict[str, Any]], window: WeekWindow, tz=None) -> List[Dict[str, Any]]:
    """
    Keep the returns of one week, newest first.

    Returns without a ``createdAt`` sort last.
    """
    in_week = [record for record in records if window.contains(return_effective_date(record, tz))]

    def created_key(record):
        created_at = coerce_datetime(record.get("createdAt"), tz)
        return (0, 0.0) if created_at is None else (1, created_at.timestamp())

    return sorted(in_week, key=created_key, reverse=True)


def count_returns(records: List[Dict[str, Any]]) -> ReturnsCounter:
    returned = sum(1 for record in records if record.get("returned"))
    return ReturnsCounter(total=len(records), returned=returned, remaining=len(records) - returned)


def build_return_row(record: Dict[str, Any]) -> ReturnRow:
    stored = ReturnRecord(**record)
    phones = [format_phone(stored.customerContact), format_phone(stored.customerPhone2)]
    return ReturnRow(
        **stored.model_dump(),
        sellingPriceDisplay=format_currency_cz0(stored.sellingPriceCzk),
        phoneDisplay=[phone for phone in phones if phone],
        statusLabel=RETURN_STATUS_LABELS[stored.returned]
    )


async def get_returns_week(returns: List[Dict[str, Any]], week_offset: int = 0,
                           reference: Optional[datetime] = None, tz=None) -> ReturnsWeekData:
    """
    Service function assembling the weekly returns view.

    Args:
        returns: Current snapshot of the returns collection
        week_offset: Weeks relative to the current one
        reference: "Today" (defaults to now)
        tz: Local timezone (defaults to the configured one)

    Returns:
        ReturnsWeekData with rows and the total/returned/remaining counter
    """
    window = week_window(reference, week_offset, tz)
    rows = filter_returns(returns, window, tz)
    return ReturnsWeekData(
        week=week_info(window),
        counter=count_returns(rows),
        items=[build_return_row(record) for record in rows]
    )


def toggle_returned(record: Dict[str, Any], now: Optional[datetime] = None) -> ReturnTogglePatch:
    """
    Compute the patch that flips the returned flag.

    ``returnedAt`` is set when the item becomes returned and cleared otherwise.
    Writing the patch is left to the caller.
    """
    returned = not bool(record.get("returned"))
    if not returned:
        return ReturnTogglePatch(returned=False, returnedAt=None)
    return ReturnTogglePatch(returned=True, returnedAt=now or datetime.now(get_settings().tz))


def parse_deposit(raw) -> float:
    """
    Parse a deposit typed by the user. Accepts ``1,5`` as well as ``1.5``.

    Invalid input is coerced to 0, never raised.
    """
    if raw is None:
        return 0.0
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw) if math.isfinite(raw) else 0.0
    text = str(raw).strip().replace(",", ".", 1)
    # Digit separators are not valid in typed amounts
    if not text or "_" in text:
        return 0.0
    try:
        number = float(text)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def build_return_payload(sale: Dict[str, Any]) -> Dict[str, Any]:
    """
    Snapshot the fields of a sale record that a return record keeps.

    ``returned`` and ``depositCzk`` are only included when the sale carries
    them, so merging the payload never resets an existing return's state.
    """
    payload = {"transactionId": sale["id"]}
    for field in RETURN_SNAPSHOT_FIELDS:
        value = sale.get(field)
        payload[field] = "" if value is None else value
    payload[SELLING_PRICE_FIELD] = to_number(sale.get(SELLING_PRICE_FIELD))

    if sale.get("depositCzk") is not None:
        payload["depositCzk"] = to_number(sale.get("depositCzk"))
    if sale.get("returned") is not None:
        payload["returned"] = bool(sale.get("returned"))
    return payload


async def add_to_returns(sale: Dict[str, Any]) -> ReturnRecord:
    """
    Upsert a return record for a sale and log the action.

    The return document id is the sale id, so repeated calls update the same
    document. The upsert and the history entry are two separate writes.

    Args:
        sale: Sale record from the current snapshot

    Returns:
        The return record as stored after the merge, or as sent when it
        cannot be read back

    Raises:
        HTTPException: If either write fails
    """
    db = get_firestore_client()
    sale_id = sale["id"]

    try:
        return_ref = db.collection(collection_path(RETURNS_COLLECTION)).document(sale_id)
        payload = build_return_payload(sale)
        payload["createdAt"] = firestore.firestore.SERVER_TIMESTAMP
        return_ref.set(payload, merge=True)

        await append_history(
            action=ADDED_TO_RETURNS_ACTION,
            doc_id=sale_id,
            details=ADDED_TO_RETURNS_DETAILS.format(item_name=sale.get("itemName") or "")
        )

    except Exception as e:
        logger.error("Add to returns failed for transaction %s: %s", sale_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ADD_TO_RETURNS_FAILED_MESSAGE
        )

    # Both writes succeeded; a failed read-back only loses the merged view
    stored_data = {**payload, "createdAt": None}
    try:
        stored = return_ref.get()
        if stored.exists:
            stored_data = stored.to_dict()
    except Exception as e:
        logger.warning("Reading back return %s failed: %s", sale_id, e)
    return ReturnRecord(**{**stored_data, "id": sale_id})


def update_return(return_id: str, fields: Dict[str, Any]) -> bool:
    """
    Apply a field-level update to a return record.

    Used for the toggle and deposit writes, which run in the background:
    failures are logged and reported as False only.
    """
    db = get_firestore_client()

    try:
        db.collection(collection_path(RETURNS_COLLECTION)).document(return_id).update(fields)
        return True
    except Exception as e:
        logger.error("Updating return %s failed: %s", return_id, e)
        return False


def save_toggle(return_id: str, patch: ReturnTogglePatch) -> bool:
    return update_return(return_id, patch.to_firestore())


def save_deposit(return_id: str, deposit: float) -> bool:
    return update_return(return_id, {"depositCzk": deposit})


def find_return(returns: List[Dict[str, Any]], return_id: str) -> Dict[str, Any]:
    """
    Look up a return record in the current snapshot.

    Raises:
        HTTPException: 404 if the record is not known
    """
    for record in returns:
        if record.get("id") == return_id:
            return record
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Return with ID {return_id} not found"
    )
