"""
Services for key/value settings, currently the PLN -> CZK exchange rate.
"""
import logging
import math
from typing import Any, Dict, Iterable

logger = logging.getLogger(__name__)

EXCHANGE_RATE_KEY = "plnToCzk"


def extract_exchange_rate(settings_docs: Iterable[Dict[str, Any]], current: float) -> float:
    """
    Pick the exchange rate out of the settings documents.

    Args:
        settings_docs: Documents shaped ``{"key": ..., "value": ...}``
        current: The rate in effect so far

    Returns:
        float: The ``plnToCzk`` value, or ``current`` if it is missing, empty
        or not a number
    """
    setting = next((doc for doc in settings_docs if doc.get("key") == EXCHANGE_RATE_KEY), None)
    if not setting or not setting.get("value"):
        return current

    try:
        rate = float(str(setting["value"]).strip().replace(",", ".", 1))
    except ValueError:
        logger.warning("Ignoring non-numeric %s setting: %r", EXCHANGE_RATE_KEY, setting["value"])
        return current

    if not math.isfinite(rate):
        logger.warning("Ignoring non-finite %s setting: %r", EXCHANGE_RATE_KEY, setting["value"])
        return current
    return rate
