"""Packaging of aggregated metrics into the report shapes served to the dashboard."""

from __future__ import annotations

from dataclasses import asdict, dataclass, is_dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Optional

from app.domain.catalog import Category, Channel
from app.domain.models import (
    CategorySales,
    ChannelSales,
    DataQuality,
    DateRange,
    PerformanceReport,
    RestaurantAnalyticsReport,
    Timecard,
)
from app.domain.normalizer import TimeBucket
from app.services.metrics_aggregator import MetricsAggregate, sales_per_hour


@dataclass(frozen=True)
class LaborTotals:
    hours: float = 0.0
    shifts: int = 0


def summarize_timecards(timecards: Iterable[Timecard]) -> LaborTotals:
    """Total worked hours and shift count; open shifts count as shifts with no hours."""
    hours = 0.0
    shifts = 0
    for card in timecards:
        hours += card.hours
        shifts += 1
    return LaborTotals(hours=round(hours, 2), shifts=shifts)


def build_performance_report(
    metrics: MetricsAggregate,
    labor: Optional[LaborTotals] = None,
    quality: Optional[DataQuality] = None,
) -> PerformanceReport:
    labor = labor or LaborTotals()
    quality = quality or DataQuality()
    quality.unclassified_items = metrics.unclassified_items
    quality.unclassified_channels = metrics.unclassified_channels

    return PerformanceReport(
        net_sales=metrics.net_sales,
        cover_count=metrics.cover_count,
        average_per_cover=metrics.average_per_cover,
        sales_per_hour=sales_per_hour(metrics.net_sales, labor.hours, metrics.period_hours),
        total_hours=labor.hours,
        total_shifts=labor.shifts,
        daily_performance=list(metrics.daily_performance),
        top_items=list(metrics.top_items),
        team_member_sales=list(metrics.team_member_sales),
        desserts_sold=metrics.category_units[Category.DESSERTS],
        beer_sold=metrics.category_units[Category.BEER],
        cocktails_sold=metrics.category_units[Category.SPIRITS],
        average_order_value=metrics.average_per_cover,
        data_quality=quality,
    )


def build_analytics_report(
    metrics: MetricsAggregate,
    quality: Optional[DataQuality] = None,
) -> RestaurantAnalyticsReport:
    quality = quality or DataQuality()
    quality.unclassified_items = metrics.unclassified_items
    quality.unclassified_channels = metrics.unclassified_channels

    categories = metrics.category_sales
    channels = metrics.channel_sales
    return RestaurantAnalyticsReport(
        net_sales=metrics.net_sales,
        total_covers=metrics.cover_count,
        average_order_value=metrics.average_per_cover,
        total_transactions=metrics.cover_count,
        lunch=metrics.time_buckets[TimeBucket.LUNCH],
        happy_hour=metrics.time_buckets[TimeBucket.HAPPY_HOUR],
        dinner=metrics.time_buckets[TimeBucket.DINNER],
        category_sales=CategorySales(
            kickstarters=categories[Category.KICKSTARTERS],
            beer=categories[Category.BEER],
            drinks=categories[Category.DRINKS],
            merch=categories[Category.MERCH],
            desserts=categories[Category.DESSERTS],
            spirits=categories[Category.SPIRITS],
        ),
        channel_sales=ChannelSales(
            square_online=channels[Channel.SQUARE_ONLINE],
            door_dash=channels[Channel.DOOR_DASH],
            in_store=channels[Channel.IN_STORE],
        ),
        data_quality=quality,
    )


# -----------------------------------------------------------------------------
# Export
# -----------------------------------------------------------------------------


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(_jsonable(k)): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def report_to_dict(report: PerformanceReport | RestaurantAnalyticsReport) -> dict:
    """Plain JSON-ready dict of a report (Decimal -> float)."""
    if not is_dataclass(report):
        raise TypeError(f"Not a report: {type(report).__name__}")
    return _jsonable(asdict(report))


def export_document(
    report: PerformanceReport | RestaurantAnalyticsReport,
    date_range: DateRange,
    location_name: Optional[str] = None,
    team_member: Optional[str] = None,
) -> dict:
    """Downloadable document: the report plus the period, location and team member it covers."""
    document = {
        "dateRange": {
            "from": date_range.start.isoformat(),
            "to": date_range.end.isoformat(),
        },
        "location": location_name or "All Locations",
        "generatedAt": datetime.now(timezone.utc).isoformat(),
        "report": report_to_dict(report),
    }
    if team_member is not None:
        document["teamMember"] = team_member
    return document


def export_filename(prefix: str) -> str:
    """`<prefix>-YYYY-MM-DD.json`, dated on the day of generation (UTC)."""
    return f"{prefix}-{datetime.now(timezone.utc).date().isoformat()}.json"
