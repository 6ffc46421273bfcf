"""
This module contains the business logic for the weekly sales view:
week filtering, free-text search, ordering and the currency-conversion summary.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException, status

from sales_dashboard.common.dates import WeekWindow, coerce_datetime, week_window
from sales_dashboard.common.schemas import WeekInfo
from sales_dashboard.common.search import SALE_SEARCH_FIELDS, search_records
from sales_dashboard.common.utils import format_currency_cz0, format_phone, to_number
from sales_dashboard.transactions.constants import (
    NET_PROFIT_FIELD, PURCHASE_PRICE_FIELD, SELLING_PRICE_FIELD
)
from sales_dashboard.transactions.schemas import (
    ProfitSource, SaleRow, SalesSummary, SalesWeekData, SummaryDisplay
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedAmount:
    """An amount that is either stored on the record or derived from other fields."""
    value: float
    source: ProfitSource


def sale_date(record: Dict[str, Any], tz=None) -> Optional[datetime]:
    """Parsed ``saleDate`` of a record, or None if missing or unparseable."""
    return coerce_datetime(record.get("saleDate"), tz)


def effective_date(record: Dict[str, Any], tz=None) -> Optional[datetime]:
    """
    The date that places a sale record in a week.

    ``saleDate`` always wins when present; ``createdAt`` is used only when the
    record has no sale date. A sale date that cannot be parsed does not fall
    back to ``createdAt``.
    """
    if record.get("saleDate"):
        return sale_date(record, tz)
    return coerce_datetime(record.get("createdAt"), tz)


def _newest_first_key(moment: Optional[datetime]):
    # Records without a date sort as the oldest
    if moment is None:
        return (0, 0.0)
    return (1, moment.timestamp())


def filter_by_week(records: Iterable[Dict[str, Any]], window: WeekWindow, tz=None) -> List[Dict[str, Any]]:
    """Keep the records whose effective date lies inside the window."""
    return [record for record in records if window.contains(effective_date(record, tz))]


def filter_and_sort(records: Iterable[Dict[str, Any]], window: WeekWindow,
                    search_term: str = "", tz=None) -> List[Dict[str, Any]]:
    """
    Produce the rows of the sales table for one week.

    Args:
        records: Sale records (dicts with an ``id``)
        window: The week to show
        search_term: Free text matched against item, brand, model, customer,
            address, seller, supplier and note
        tz: Local timezone (defaults to the configured one)

    Returns:
        The matching records ordered by sale date, newest first
    """
    in_week = filter_by_week(records, window, tz)
    matching = search_records(in_week, search_term, SALE_SEARCH_FIELDS)
    return sorted(
        matching,
        key=lambda record: _newest_first_key(sale_date(record, tz)),
        reverse=True
    )


def converted_purchase(record: Dict[str, Any], exchange_rate) -> float:
    """Purchase price converted from PLN to CZK."""
    return to_number(record.get(PURCHASE_PRICE_FIELD)) * to_number(exchange_rate)


def resolve_profit(record: Dict[str, Any], exchange_rate) -> ResolvedAmount:
    """
    Net profit of one sale.

    A stored ``netProfitCzk`` (a stored 0 included) is used as is; otherwise the
    profit is derived as selling price minus the converted purchase price.
    """
    stored = record.get(NET_PROFIT_FIELD)
    if stored is not None and stored != "":
        return ResolvedAmount(value=to_number(stored), source=ProfitSource.STORED)
    derived = to_number(record.get(SELLING_PRICE_FIELD)) - converted_purchase(record, exchange_rate)
    return ResolvedAmount(value=derived, source=ProfitSource.DERIVED)


def summarize(records: List[Dict[str, Any]], exchange_rate) -> SalesSummary:
    """
    Totals for the summary cells. Recomputed from scratch on every call.

    Args:
        records: The already filtered records of one week
        exchange_rate: PLN -> CZK rate

    Returns:
        SalesSummary with unrounded totals and their display strings
    """
    purchase_total = 0.0
    selling_total = 0.0
    profit_total = 0.0

    for record in records:
        purchase_total += converted_purchase(record, exchange_rate)
        selling_total += to_number(record.get(SELLING_PRICE_FIELD))
        profit_total += resolve_profit(record, exchange_rate).value

    return SalesSummary(
        purchaseTotal=purchase_total,
        sellingTotal=selling_total,
        profitTotal=profit_total,
        count=len(records),
        display=SummaryDisplay(
            purchase=format_currency_cz0(purchase_total),
            selling=format_currency_cz0(selling_total),
            profit=format_currency_cz0(profit_total)
        )
    )


def build_sale_row(record: Dict[str, Any], exchange_rate, tz=None) -> SaleRow:
    """Shape one sale record into a table row."""
    profit = resolve_profit(record, exchange_rate)
    return SaleRow(
        id=record["id"],
        saleDate=effective_date(record, tz),
        itemName=record.get("itemName"),
        brand=record.get("brand"),
        model=record.get("model"),
        note=record.get("note"),
        seller=record.get("seller"),
        supplier=record.get("supplier"),
        purchasePriceCzk=converted_purchase(record, exchange_rate),
        sellingPriceCzk=to_number(record.get(SELLING_PRICE_FIELD)),
        profitCzk=profit.value,
        profitSource=profit.source,
        deliveryCity=record.get("deliveryCity"),
        customerName=record.get("customerName"),
        customerAddress=record.get("customerAddress"),
        customerContact=format_phone(record.get("customerContact")),
        customerPhone2=format_phone(record.get("customerPhone2"))
    )


def week_info(window: WeekWindow) -> WeekInfo:
    return WeekInfo(offset=window.offset, start=window.start, end=window.end, label=window.label)


async def get_sales_week(transactions: List[Dict[str, Any]], exchange_rate: float,
                         week_offset: int = 0, search_term: str = "",
                         reference: Optional[datetime] = None, tz=None) -> SalesWeekData:
    """
    Service function assembling the weekly sales view.

    Args:
        transactions: Current snapshot of the transactions collection
        exchange_rate: PLN -> CZK rate in effect
        week_offset: Weeks relative to the current one
        search_term: Free-text filter
        reference: "Today" (defaults to now)
        tz: Local timezone (defaults to the configured one)

    Returns:
        SalesWeekData with rows, summary and week label
    """
    window = week_window(reference, week_offset, tz)
    rows = filter_and_sort(transactions, window, search_term, tz)
    logger.debug("Sales week %s: %d of %d records match", window.label, len(rows), len(transactions))

    return SalesWeekData(
        week=week_info(window),
        search=search_term or "",
        exchangeRate=to_number(exchange_rate),
        summary=summarize(rows, exchange_rate),
        items=[build_sale_row(record, exchange_rate, tz) for record in rows]
    )


def find_transaction(transactions: List[Dict[str, Any]], transaction_id: str) -> Dict[str, Any]:
    """
    Look up a sale record in the current snapshot.

    Raises:
        HTTPException: 404 if the record is not known
    """
    for record in transactions:
        if record.get("id") == transaction_id:
            return record
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Transaction with ID {transaction_id} not found"
    )
