"""
Module with in-memory free-text search over dashboard records.
"""
from typing import Any, Dict, Iterable, List

# Fields of a sale record the search box looks at
SALE_SEARCH_FIELDS = [
    "itemName",
    "brand",
    "model",
    "customerName",
    "customerAddress",
    "seller",
    "supplier",
    "note",
]


def normalize_query(query) -> str:
    return str(query or "").lower()


def matches_query(record: Dict[str, Any], query: str, fields: Iterable[str] = None) -> bool:
    """
    Case-insensitive substring match of ``query`` against a fixed set of fields.

    Args:
        record: Record dictionary as read from Firestore
        query: Search term; an empty term matches everything
        fields: Field names to search (defaults to SALE_SEARCH_FIELDS)

    Returns:
        True if any field contains the query
    """
    normalized = normalize_query(query)
    if not normalized:
        return True

    if fields is None:
        fields = SALE_SEARCH_FIELDS

    for field in fields:
        value = record.get(field)
        # Missing values are treated as empty strings
        text = "" if value is None else str(value)
        if normalized in text.lower():
            return True
    return False


def search_records(records: Iterable[Dict[str, Any]], query: str,
                   fields: Iterable[str] = None) -> List[Dict[str, Any]]:
    """Keep the records matching ``query``, preserving their order."""
    fields = list(fields) if fields is not None else None
    return [record for record in records if matches_query(record, query, fields)]
