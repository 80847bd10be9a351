"""
Money, quantity and time helpers shared by the aggregation code.

Square reports money as integer minor units (cents) and timestamps as
ISO-8601 strings. Everything here is pure.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone, tzinfo
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo

CENTS = Decimal(100)

# Seconds fraction of any length; fromisoformat before 3.11 takes only 3 or 6 digits.
_FRACTION = re.compile(r"\.(\d+)")

LUNCH_START_HOUR = 11
HAPPY_HOUR_START_HOUR = 15
DINNER_START_HOUR = 18


class TimeBucket(str, Enum):
    LUNCH = "lunch"
    HAPPY_HOUR = "happy_hour"
    DINNER = "dinner"


def to_decimal(minor_units: Optional[int]) -> Decimal:
    """Convert integer minor currency units to major units (cents -> dollars)."""
    if not minor_units:
        return Decimal(0)
    return Decimal(int(minor_units)) / CENTS


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse ISO-8601 text as given, accepting a `Z` suffix and a seconds
    fraction of any length (padded or cut to microseconds).

    The result is naive when the text carries no offset.
    """
    text = value.strip().replace("Z", "+00:00")
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime (naive means UTC)."""
    parsed = parse_iso_datetime(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _local(ts: datetime, tz: Optional[tzinfo]) -> datetime:
    return ts.astimezone(tz or timezone.utc)


def bucket_of(ts: datetime, tz: Optional[tzinfo] = None) -> TimeBucket:
    """
    Classify a timestamp by local hour.

    [11, 15) is lunch, [15, 18) is happy hour, everything else (including
    the hours after midnight) is dinner.
    """
    hour = _local(ts, tz).hour
    if LUNCH_START_HOUR <= hour < HAPPY_HOUR_START_HOUR:
        return TimeBucket.LUNCH
    if HAPPY_HOUR_START_HOUR <= hour < DINNER_START_HOUR:
        return TimeBucket.HAPPY_HOUR
    return TimeBucket.DINNER


def date_key(ts: datetime, tz: Optional[tzinfo] = None) -> str:
    """Local calendar date as YYYY-MM-DD (sorts lexically)."""
    return _local(ts, tz).date().isoformat()


def parse_quantity(value: Optional[str]) -> int:
    """
    Parse Square's string-encoded quantity.

    Missing or blank means one unit; anything non-numeric counts as zero
    units; fractional quantities (weighed items) are truncated.
    """
    if value is None:
        return 1
    text = str(value).strip()
    if not text:
        return 1
    try:
        qty = Decimal(text)
    except InvalidOperation:
        return 0
    if not qty.is_finite():
        return 0
    return int(qty)


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """IANA zone for report bucketing; UTC when unset."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)
