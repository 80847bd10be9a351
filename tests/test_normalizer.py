from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from app.domain.normalizer import (
    TimeBucket,
    bucket_of,
    date_key,
    parse_quantity,
    parse_timestamp,
    resolve_timezone,
    to_decimal,
)
from tests.factories import utc


@pytest.mark.parametrize(
    "hour,expected",
    [
        (11, TimeBucket.LUNCH),
        (14, TimeBucket.LUNCH),
        (15, TimeBucket.HAPPY_HOUR),
        (17, TimeBucket.HAPPY_HOUR),
        (18, TimeBucket.DINNER),
        (20, TimeBucket.DINNER),
        (2, TimeBucket.DINNER),
        (10, TimeBucket.DINNER),
    ],
)
def test_bucket_of_by_hour(hour, expected):
    assert bucket_of(utc(2024, 3, 1, hour, 59)) is expected


def test_bucket_of_uses_local_hour():
    # 19:30 UTC is 14:30 in New York during standard time
    ts = utc(2024, 1, 10, 19, 30)
    assert bucket_of(ts) is TimeBucket.DINNER
    assert bucket_of(ts, ZoneInfo("America/New_York")) is TimeBucket.LUNCH


def test_date_key_follows_timezone():
    ts = utc(2024, 3, 2, 3, 0)
    assert date_key(ts) == "2024-03-02"
    assert date_key(ts, ZoneInfo("America/Los_Angeles")) == "2024-03-01"


def test_to_decimal_converts_cents():
    assert to_decimal(2550) == Decimal("25.50")
    assert to_decimal(-100) == Decimal("-1")


@pytest.mark.parametrize("value", [None, 0])
def test_to_decimal_missing_is_zero(value):
    assert to_decimal(value) == Decimal(0)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2", 2),
        ("10", 10),
        (None, 1),
        ("", 1),
        ("   ", 1),
        ("abc", 0),
        ("NaN", 0),
        ("1.5", 1),
        ("0.75", 0),
    ],
)
def test_parse_quantity(raw, expected):
    assert parse_quantity(raw) == expected


def test_parse_timestamp_accepts_z_suffix():
    parsed = parse_timestamp("2024-03-01T12:30:00Z")
    assert parsed == datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)


def test_parse_timestamp_normalizes_offsets_to_utc():
    parsed = parse_timestamp("2024-03-01T07:30:00-05:00")
    assert parsed.tzinfo == timezone.utc
    assert parsed.hour == 12


def test_parse_timestamp_treats_naive_as_utc():
    assert parse_timestamp("2024-03-01T12:30:00").tzinfo == timezone.utc


def test_resolve_timezone():
    assert resolve_timezone(None) is timezone.utc
    assert resolve_timezone("utc") is timezone.utc
    assert resolve_timezone("America/Chicago") == ZoneInfo("America/Chicago")


@pytest.mark.parametrize(
    "raw,micros",
    [
        ("2024-03-01T12:30:34.5Z", 500000),
        ("2024-03-01T12:30:34.12345Z", 123450),
        ("2024-03-01T12:30:34.1234567Z", 123456),
    ],
)
def test_parse_timestamp_accepts_any_fraction_length(raw, micros):
    parsed = parse_timestamp(raw)
    assert parsed.second == 34
    assert parsed.microsecond == micros
