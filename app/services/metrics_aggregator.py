"""
Single-pass reduction of an order set into report metrics.

Everything is computed in one walk over the orders: totals, the per-day
series, item and team-member rankings, category/channel sums and
time-of-day buckets. Rankings are flattened from insertion-ordered dicts
and sorted with a stable sort, so equal values keep first-seen order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional, Sequence

from app.core.logging import metrics_logger
from app.domain.catalog import Category, Channel, Classifier, default_classifier
from app.domain.models import (
    DailyPerformance,
    DateRange,
    Order,
    TeamMemberSales,
    TimeBucketSales,
    TopItem,
)
from app.domain.normalizer import TimeBucket, bucket_of, date_key, parse_quantity

TOP_ITEMS_LIMIT = 10
CENT = Decimal("0.01")


def ratio(numerator: Decimal, denominator: float | int | Decimal) -> Decimal:
    """numerator / denominator rounded to cents; zero when the denominator is not positive."""
    if not denominator or denominator <= 0:
        return Decimal(0)
    return (numerator / Decimal(str(denominator))).quantize(CENT, rounding=ROUND_HALF_UP)


def sales_per_hour(net_sales: Decimal, labor_hours: float, period_hours: float) -> Decimal:
    """Sales per worked hour, falling back to the period length when no labor was recorded."""
    if labor_hours > 0:
        return ratio(net_sales, labor_hours)
    return ratio(net_sales, period_hours)


@dataclass
class _Totals:
    sales: Decimal = Decimal(0)
    covers: int = 0


@dataclass
class _ItemTotals:
    quantity: int = 0
    revenue: Decimal = Decimal(0)


@dataclass
class MetricsAggregate:
    net_sales: Decimal = Decimal(0)
    cover_count: int = 0
    period_hours: float = 0.0
    daily_performance: list[DailyPerformance] = field(default_factory=list)
    top_items: list[TopItem] = field(default_factory=list)
    team_member_sales: list[TeamMemberSales] = field(default_factory=list)
    category_sales: dict[Category, Decimal] = field(
        default_factory=lambda: {c: Decimal(0) for c in Category}
    )
    category_units: dict[Category, int] = field(default_factory=lambda: {c: 0 for c in Category})
    channel_sales: dict[Channel, Decimal] = field(
        default_factory=lambda: {c: Decimal(0) for c in Channel}
    )
    time_buckets: dict[TimeBucket, TimeBucketSales] = field(
        default_factory=lambda: {b: TimeBucketSales() for b in TimeBucket}
    )
    unclassified_items: int = 0
    unclassified_channels: int = 0

    @property
    def average_per_cover(self) -> Decimal:
        return ratio(self.net_sales, self.cover_count)


def aggregate(
    orders: Sequence[Order],
    date_range: DateRange,
    *,
    tz: Optional[tzinfo] = None,
    classifier: Optional[Classifier] = None,
    team_member_names: Optional[Mapping[str, str]] = None,
    payment_attribution: Optional[Mapping[str, str]] = None,
    credit_to: Optional[str] = None,
    top_n: int = TOP_ITEMS_LIMIT,
) -> MetricsAggregate:
    """
    Reduce `orders` into a MetricsAggregate.

    Args:
        orders: Orders already narrowed to the report's scope
        date_range: Report period; an inverted range yields the empty aggregate
        tz: Timezone for day keys and time-of-day buckets (UTC when omitted)
        classifier: Item/channel classifier (keyword tables by default)
        team_member_names: id -> display name for the team ranking
        payment_attribution: order id -> team member id, used when an
            order's fulfillments name nobody
        credit_to: Team member every order is credited to in the ranking,
            set when the orders were narrowed to that member
        top_n: Size of the top items list
    """
    classifier = classifier or default_classifier
    names = team_member_names or {}
    paid_by = payment_attribution or {}

    if date_range.is_inverted:
        metrics_logger.warning(
            "Inverted date range, returning empty metrics",
            start=date_range.start.isoformat(),
            end=date_range.end.isoformat(),
        )
        return MetricsAggregate()
    if date_range.start == date_range.end:
        metrics_logger.warning("Zero-length date range", start=date_range.start.isoformat())

    result = MetricsAggregate(period_hours=date_range.hours)
    days: dict[str, _Totals] = {}
    items: dict[str, _ItemTotals] = {}
    members: dict[str, Decimal] = {}

    for order in orders:
        total = order.total_money.decimal
        result.net_sales += total
        result.cover_count += 1

        day = days.setdefault(date_key(order.created_at, tz), _Totals())
        day.sales += total
        day.covers += 1

        bucket = result.time_buckets[bucket_of(order.created_at, tz)]
        bucket.sales += total
        bucket.covers += 1

        channel = classifier.match_channel(order.source)
        if channel is None:
            result.unclassified_channels += 1
            metrics_logger.debug("Unclassified order source", source=order.source)
            channel = Channel.IN_STORE
        result.channel_sales[channel] += total

        member_ids = order.team_member_ids
        if credit_to:
            member_id = credit_to
        else:
            member_id = member_ids[0] if member_ids else paid_by.get(order.id)
        if member_id:
            members[member_id] = members.get(member_id, Decimal(0)) + total

        for line in order.line_items:
            qty = parse_quantity(line.quantity)
            revenue = line.total_money.decimal

            item = items.setdefault(line.name, _ItemTotals())
            item.quantity += qty
            item.revenue += revenue

            category = classifier.classify(line.name)
            if category is None:
                result.unclassified_items += 1
                metrics_logger.debug("Unclassified item", item=line.name)
                continue
            result.category_sales[category] += revenue
            result.category_units[category] += qty

    result.daily_performance = [
        DailyPerformance(date=key, sales=totals.sales, covers=totals.covers)
        for key, totals in sorted(days.items())
    ]

    ranked_items = sorted(items.items(), key=lambda kv: kv[1].revenue, reverse=True)
    result.top_items = [
        TopItem(name=name, quantity=totals.quantity, revenue=totals.revenue)
        for name, totals in ranked_items[:top_n]
    ]

    ranked_members = sorted(
        ((mid, sales) for mid, sales in members.items() if sales != 0),
        key=lambda kv: kv[1],
        reverse=True,
    )
    result.team_member_sales = [
        TeamMemberSales(team_member_id=mid, name=names.get(mid, mid), sales=sales)
        for mid, sales in ranked_members
    ]

    if result.unclassified_items or result.unclassified_channels:
        metrics_logger.info(
            "Classification gaps",
            unclassified_items=result.unclassified_items,
            unclassified_channels=result.unclassified_channels,
        )
    return result
