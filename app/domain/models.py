"""
Domain models.

Upstream records (orders, payments, timecards...) are parsed from Square's
loosely typed JSON into immutable dataclasses with documented defaults, so
no None ever reaches the arithmetic. Report dataclasses are what the
aggregation produces; money is kept as Decimal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from app.domain.normalizer import parse_timestamp, to_decimal


def _list(payload: Mapping[str, Any], key: str) -> list:
    value = payload.get(key)
    return value if isinstance(value, list) else []


def _timestamp(payload: Mapping[str, Any], key: str) -> Optional[datetime]:
    value = payload.get(key)
    if not value:
        return None
    return parse_timestamp(value)


# -----------------------------------------------------------------------------
# Upstream records
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Money:
    """Integer minor units plus ISO currency code."""

    amount: int = 0
    currency: str = "USD"

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "Money":
        if not payload:
            return cls()
        return cls(
            amount=int(payload.get("amount") or 0),
            currency=payload.get("currency") or "USD",
        )

    @property
    def decimal(self) -> Decimal:
        return to_decimal(self.amount)


@dataclass(frozen=True)
class LineItem:
    name: str
    quantity: Optional[str] = "1"
    total_money: Money = field(default_factory=Money)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "LineItem":
        return cls(
            name=(payload.get("name") or "").strip(),
            quantity=payload.get("quantity"),
            total_money=Money.from_payload(payload.get("total_money")),
        )


@dataclass(frozen=True)
class FulfillmentEntry:
    team_member_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "FulfillmentEntry":
        return cls(team_member_id=payload.get("team_member_id") or None)


@dataclass(frozen=True)
class Fulfillment:
    type: Optional[str] = None
    state: Optional[str] = None
    entries: tuple[FulfillmentEntry, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Fulfillment":
        return cls(
            type=payload.get("type"),
            state=payload.get("state"),
            entries=tuple(
                FulfillmentEntry.from_payload(e) for e in _list(payload, "fulfillment_entries")
            ),
        )


@dataclass(frozen=True)
class Order:
    """A Square order. Never mutated once fetched."""

    id: str
    created_at: datetime
    total_money: Money = field(default_factory=Money)
    line_items: tuple[LineItem, ...] = ()
    fulfillments: tuple[Fulfillment, ...] = ()
    source: Optional[str] = None
    state: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Order":
        source = payload.get("source") or {}
        return cls(
            id=payload["id"],
            created_at=parse_timestamp(payload["created_at"]),
            total_money=Money.from_payload(payload.get("total_money")),
            line_items=tuple(LineItem.from_payload(li) for li in _list(payload, "line_items")),
            fulfillments=tuple(
                Fulfillment.from_payload(f) for f in _list(payload, "fulfillments")
            ),
            source=source.get("name") if isinstance(source, Mapping) else None,
            state=payload.get("state"),
        )

    @property
    def team_member_ids(self) -> list[str]:
        """Team members named in fulfillment entries, first-seen order, no repeats."""
        seen: list[str] = []
        for fulfillment in self.fulfillments:
            for entry in fulfillment.entries:
                if entry.team_member_id and entry.team_member_id not in seen:
                    seen.append(entry.team_member_id)
        return seen


@dataclass(frozen=True)
class Payment:
    id: str
    order_id: Optional[str] = None
    team_member_id: Optional[str] = None
    created_at: Optional[datetime] = None
    amount_money: Money = field(default_factory=Money)
    status: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Payment":
        return cls(
            id=payload["id"],
            order_id=payload.get("order_id") or None,
            team_member_id=payload.get("team_member_id") or payload.get("employee_id") or None,
            created_at=_timestamp(payload, "created_at"),
            amount_money=Money.from_payload(payload.get("amount_money")),
            status=payload.get("status"),
        )


@dataclass(frozen=True)
class Timecard:
    team_member_id: Optional[str]
    start_at: datetime
    end_at: Optional[datetime] = None
    unpaid_break_seconds: float = 0.0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Timecard":
        unpaid = 0.0
        for brk in _list(payload, "breaks"):
            if brk.get("is_paid"):
                continue
            brk_start = _timestamp(brk, "start_at")
            brk_end = _timestamp(brk, "end_at")
            if brk_start and brk_end and brk_end > brk_start:
                unpaid += (brk_end - brk_start).total_seconds()
        return cls(
            team_member_id=payload.get("team_member_id"),
            start_at=parse_timestamp(payload["start_at"]),
            end_at=_timestamp(payload, "end_at"),
            unpaid_break_seconds=unpaid,
        )

    @property
    def hours(self) -> float:
        """Worked hours; open shifts (no clock-out yet) count as zero."""
        if self.end_at is None or self.end_at <= self.start_at:
            return 0.0
        seconds = (self.end_at - self.start_at).total_seconds() - self.unpaid_break_seconds
        return max(seconds, 0.0) / 3600


@dataclass(frozen=True)
class TeamMember:
    id: str
    name: str
    role: str = "Team Member"
    status: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TeamMember":
        name = f"{payload.get('given_name') or ''} {payload.get('family_name') or ''}".strip()
        assignments = payload.get("assigned_locations") or []
        role = None
        if isinstance(assignments, list) and assignments:
            role = assignments[0].get("job_title")
        return cls(
            id=payload["id"],
            name=name or payload["id"],
            role=role or "Team Member",
            status=payload.get("status"),
        )


@dataclass(frozen=True)
class Location:
    id: str
    name: str
    status: Optional[str] = None
    timezone: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Location":
        return cls(
            id=payload["id"],
            name=payload.get("name") or payload["id"],
            status=payload.get("status"),
            timezone=payload.get("timezone"),
        )


@dataclass(frozen=True)
class DateRange:
    """Report period. `start > end` is tolerated and aggregates to nothing."""

    start: datetime
    end: datetime

    @property
    def is_inverted(self) -> bool:
        return self.start > self.end

    @property
    def hours(self) -> float:
        """Period length in hours, never negative."""
        return max((self.end - self.start).total_seconds() / 3600, 0.0)


# -----------------------------------------------------------------------------
# Reports
# -----------------------------------------------------------------------------


@dataclass
class DailyPerformance:
    date: str
    sales: Decimal
    covers: int


@dataclass
class TopItem:
    name: str
    quantity: int
    revenue: Decimal


@dataclass
class TeamMemberSales:
    team_member_id: str
    name: str
    sales: Decimal


@dataclass
class TimeBucketSales:
    covers: int = 0
    sales: Decimal = Decimal(0)


@dataclass
class CategorySales:
    kickstarters: Decimal = Decimal(0)
    beer: Decimal = Decimal(0)
    drinks: Decimal = Decimal(0)
    merch: Decimal = Decimal(0)
    desserts: Decimal = Decimal(0)
    spirits: Decimal = Decimal(0)


@dataclass
class ChannelSales:
    square_online: Decimal = Decimal(0)
    door_dash: Decimal = Decimal(0)
    in_store: Decimal = Decimal(0)


@dataclass
class DataQuality:
    """Counters for data the report could not fully account for."""

    unclassified_items: int = 0
    unclassified_channels: int = 0
    truncated: bool = False
    pages_fetched: int = 0


@dataclass
class PerformanceReport:
    net_sales: Decimal
    cover_count: int
    average_per_cover: Decimal
    sales_per_hour: Decimal
    total_hours: float
    total_shifts: int
    daily_performance: list[DailyPerformance]
    top_items: list[TopItem]
    team_member_sales: list[TeamMemberSales]
    desserts_sold: int
    beer_sold: int
    cocktails_sold: int
    average_order_value: Decimal
    data_quality: DataQuality = field(default_factory=DataQuality)


@dataclass
class RestaurantAnalyticsReport:
    net_sales: Decimal
    total_covers: int
    average_order_value: Decimal
    total_transactions: int
    lunch: TimeBucketSales
    happy_hour: TimeBucketSales
    dinner: TimeBucketSales
    category_sales: CategorySales
    channel_sales: ChannelSales
    data_quality: DataQuality = field(default_factory=DataQuality)
