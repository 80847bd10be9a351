"""
Domain models and report DTOs.
Domain layer independent of infrastructure.
"""

from .catalog import Category, Channel, KeywordClassifier, classify, classify_channel
from .filters import ALL_TEAM_MEMBERS, ReportFilters, filter_by_team_member
from .models import (
    DateRange,
    Order,
    PerformanceReport,
    RestaurantAnalyticsReport,
    TeamMember,
)
from .normalizer import TimeBucket

__all__ = [
    "ALL_TEAM_MEMBERS",
    "Category",
    "Channel",
    "classify",
    "classify_channel",
    "DateRange",
    "filter_by_team_member",
    "KeywordClassifier",
    "Order",
    "PerformanceReport",
    "ReportFilters",
    "RestaurantAnalyticsReport",
    "TeamMember",
    "TimeBucket",
]
