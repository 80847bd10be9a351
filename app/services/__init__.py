"""
Report services kept apart from the routes.

Aggregation is pure; orchestration and Square I/O live in AnalyticsService.
"""

from .analytics_service import AnalyticsService  # noqa: F401
from .metrics_aggregator import MetricsAggregate, aggregate  # noqa: F401
from .report_assembler import (  # noqa: F401
    build_analytics_report,
    build_performance_report,
    export_document,
    report_to_dict,
)

__all__ = [
    "aggregate",
    "AnalyticsService",
    "build_analytics_report",
    "build_performance_report",
    "export_document",
    "MetricsAggregate",
    "report_to_dict",
]
