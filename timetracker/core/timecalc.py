"""
Time arithmetic shared by the timer lifecycle and the report aggregator.

All instants are normalized to timezone-aware UTC before they are stored
or compared; naive values are taken to already be in UTC.
"""
from datetime import date, datetime, time, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

SIXTY = Decimal(60)
WHOLE = Decimal("1")
HOUR_PLACES = Decimal("0.01")


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return ``value`` as an aware UTC datetime (``None`` passes through)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def duration_minutes(start_time: datetime, end_time: datetime) -> int:
    """
    Whole minutes between two instants, rounded half-up.

    Args:
        start_time: Start of the range
        end_time: End of the range

    Returns:
        int: Rounded number of minutes
    """
    seconds = Decimal(str((to_utc(end_time) - to_utc(start_time)).total_seconds()))
    return int((seconds / SIXTY).quantize(WHOLE, rounding=ROUND_HALF_UP))


def minutes_to_hours(minutes: Optional[int]) -> float:
    """Convert minutes to hours rounded to two decimal places."""
    if not minutes:
        return 0.0
    hours = Decimal(minutes) / SIXTY
    return float(hours.quantize(HOUR_PLACES, rounding=ROUND_HALF_UP))


def parse_range_bound(raw: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse a ``startDate``/``endDate`` query value.

    Accepts a full ISO-8601 timestamp or a bare ``YYYY-MM-DD`` date. A bare
    date used as an upper bound covers the whole day.

    Raises:
        ValueError: If the value is not a recognizable date or timestamp
    """
    if raw is None or not raw.strip():
        return None
    raw = raw.strip()
    if len(raw) == 10:
        day = date.fromisoformat(raw)
        return datetime.combine(day, time.max if end_of_day else time.min, tzinfo=timezone.utc)
    return to_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
