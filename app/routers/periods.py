"""Query-parameter helpers shared by the report routers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from fastapi import HTTPException

from app.domain.normalizer import parse_iso_datetime

DEFAULT_PERIOD_DAYS = 7


def _parse_iso8601(value: str, *, is_end: bool = False, tz: tzinfo = timezone.utc) -> datetime:
    """
    Parse ISO8601 strings (accepting a Z suffix) and normalize to UTC.

    Bare dates and naive datetimes are wall-clock times in the report
    timezone `tz`. A bare date (YYYY-MM-DD) used as the end of a period
    covers that whole day, so it becomes midnight of the following day.
    """
    text = value.strip()
    try:
        parsed = parse_iso_datetime(text)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid date/time: {value}") from exc
    if is_end and len(text) == 10:
        parsed += timedelta(days=1)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed.astimezone(timezone.utc)


def default_period(
    days: int = DEFAULT_PERIOD_DAYS, tz: tzinfo = timezone.utc
) -> tuple[datetime, datetime]:
    """Last *days* days, from local midnight in `tz` until now, in UTC."""
    now = datetime.now(tz)
    start = (now - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)
    return start.astimezone(timezone.utc), now.astimezone(timezone.utc)


def resolve_period(
    start: Optional[str], end: Optional[str], tz: tzinfo = timezone.utc
) -> tuple[datetime, datetime]:
    """
    Turn the optional start/end query parameters into a UTC period.

    An inverted period is returned as-is: the report for it is empty, not an error.
    """
    if not start and not end:
        return default_period(tz=tz)
    if not start or not end:
        raise HTTPException(status_code=400, detail="Provide both 'start' and 'end', or neither.")
    return _parse_iso8601(start, tz=tz), _parse_iso8601(end, is_end=True, tz=tz)
