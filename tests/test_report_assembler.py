from decimal import Decimal

import pytest

from app.domain.models import DataQuality, DateRange, Timecard
from app.services.metrics_aggregator import aggregate
from app.services.report_assembler import (
    LaborTotals,
    build_analytics_report,
    build_performance_report,
    export_document,
    export_filename,
    report_to_dict,
    summarize_timecards,
)
from tests.factories import utc

PERIOD = DateRange(utc(2024, 3, 1), utc(2024, 3, 3))


def test_summarize_timecards_counts_open_shifts():
    cards = [
        Timecard(team_member_id="a", start_at=utc(2024, 3, 1, 9), end_at=utc(2024, 3, 1, 17)),
        Timecard(team_member_id="b", start_at=utc(2024, 3, 1, 12), end_at=None),
    ]
    assert summarize_timecards(cards) == LaborTotals(hours=8.0, shifts=2)


def test_performance_report_without_labor_uses_period_hours(sample_orders):
    report = build_performance_report(aggregate(sample_orders, PERIOD))

    assert report.total_hours == 0.0
    assert report.total_shifts == 0
    # 80.00 over the 48 hour period
    assert report.sales_per_hour == Decimal("1.67")


def test_zero_report_has_no_nan_or_negative_values():
    report = build_performance_report(aggregate([], PERIOD))

    assert report.net_sales == 0
    assert report.average_per_cover == 0
    assert report.sales_per_hour == 0
    assert report.daily_performance == []


def test_data_quality_carries_fetch_state_and_gaps(sample_orders):
    metrics = aggregate(sample_orders, PERIOD)
    metrics.unclassified_items = 2
    report = build_analytics_report(metrics, DataQuality(truncated=True, pages_fetched=20))

    assert report.data_quality == DataQuality(
        unclassified_items=2, unclassified_channels=0, truncated=True, pages_fetched=20
    )


def test_report_to_dict_is_json_ready(sample_orders):
    data = report_to_dict(build_analytics_report(aggregate(sample_orders, PERIOD)))

    assert data["net_sales"] == 80.0
    assert data["lunch"] == {"covers": 1, "sales": 25.0}
    assert data["category_sales"]["merch"] == 19.0


def test_report_to_dict_rejects_non_reports():
    with pytest.raises(TypeError):
        report_to_dict({"net_sales": 1})


def test_export_document_shape(sample_orders):
    report = build_performance_report(aggregate(sample_orders, PERIOD))
    document = export_document(report, PERIOD, None, team_member="Ana Lima")

    assert document["dateRange"] == {
        "from": "2024-03-01T00:00:00+00:00",
        "to": "2024-03-03T00:00:00+00:00",
    }
    assert document["location"] == "All Locations"
    assert document["teamMember"] == "Ana Lima"
    assert "generatedAt" in document
    assert document["report"]["cover_count"] == 3


def test_export_filename():
    name = export_filename("restaurant-analytics")
    assert name.startswith("restaurant-analytics-")
    assert name.endswith(".json")
    assert len(name) == len("restaurant-analytics-YYYY-MM-DD.json")
