"""
Date helpers: timestamp coercion and the Monday-based week windows used by the dashboard views.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from sales_dashboard.common.config import get_settings

WEEK_LABEL_FORMAT = "%d.%m.%Y"


def _local_tz(tz=None):
    return tz or get_settings().tz


def _localize(naive: datetime, tz):
    # pytz zones need localize() to pick the right UTC offset
    if hasattr(tz, "localize"):
        return tz.localize(naive)
    return naive.replace(tzinfo=tz)


def coerce_datetime(value, tz=None) -> Optional[datetime]:
    """
    Convert a stored date value to an aware datetime in the local timezone.

    Handles Firestore timestamps (datetime subclasses), plain datetimes and dates,
    and ISO strings. Date-only strings such as ``2025-01-06`` mean local midnight.

    Args:
        value: The value read from a document
        tz: Target timezone (defaults to the configured one)

    Returns:
        Aware datetime, or None when the value is missing or cannot be parsed
    """
    tz = _local_tz(tz)
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return _localize(value, tz)
        return value.astimezone(tz)

    if isinstance(value, date):
        return _localize(datetime.combine(value, datetime.min.time()), tz)

    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            try:
                return coerce_datetime(date.fromisoformat(text), tz)
            except ValueError:
                return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return coerce_datetime(datetime.fromisoformat(text), tz)
        except ValueError:
            return None

    return None


def start_of_week(reference, tz=None) -> datetime:
    """
    Return Monday 00:00 (local time) of the week containing ``reference``.

    Sunday belongs to the week that started six days earlier.
    """
    tz = _local_tz(tz)
    moment = coerce_datetime(reference, tz)
    day = (moment.weekday() + 1) % 7  # 0=Sun..6=Sat
    diff = (-6 if day == 0 else 1) - day
    monday = moment.date() + timedelta(days=diff)
    return _localize(datetime.combine(monday, datetime.min.time()), tz)


@dataclass(frozen=True)
class WeekWindow:
    """Half-open interval [start, end) covering one Monday-based week."""
    start: datetime
    end: datetime
    offset: int = 0

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        return self.start <= moment < self.end

    @property
    def label(self) -> str:
        last_day = self.end.date() - timedelta(days=1)
        return f"{self.start.strftime(WEEK_LABEL_FORMAT)} – {last_day.strftime(WEEK_LABEL_FORMAT)}"


def week_window(reference=None, week_offset: int = 0, tz=None) -> WeekWindow:
    """
    Compute the week window ``week_offset`` weeks away from the week of ``reference``.

    Args:
        reference: Any moment inside the base week (defaults to now)
        week_offset: Whole weeks to shift; negative values go back in time
        tz: Local timezone (defaults to the configured one)

    Returns:
        WeekWindow whose start and end are local midnights seven calendar days apart
    """
    tz = _local_tz(tz)
    if reference is None:
        reference = datetime.now(tz)
    base = start_of_week(reference, tz)
    start_day = base.date() + timedelta(weeks=week_offset)
    end_day = start_day + timedelta(days=7)
    midnight = datetime.min.time()
    return WeekWindow(
        start=_localize(datetime.combine(start_day, midnight), tz),
        end=_localize(datetime.combine(end_day, midnight), tz),
        offset=week_offset
    )
