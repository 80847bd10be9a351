"""Report orchestration: fetch, narrow, aggregate, assemble."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone, tzinfo
from typing import Any, Awaitable, Optional

from app.core.logging import metrics_logger
from app.domain.catalog import Classifier
from app.domain.filters import ALL_TEAM_MEMBERS, ReportFilters, filter_by_team_member
from app.domain.models import (
    DataQuality,
    Location,
    PerformanceReport,
    RestaurantAnalyticsReport,
    TeamMember,
)
from app.repositories.protocols import (
    LocationRepositoryProtocol,
    OrderRepositoryProtocol,
    PaymentRepositoryProtocol,
    TeamRepositoryProtocol,
)
from app.services.metrics_aggregator import TOP_ITEMS_LIMIT, aggregate
from app.services.report_assembler import (
    build_analytics_report,
    build_performance_report,
    summarize_timecards,
)


async def _gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """Run independent reads concurrently; the first failure cancels the rest."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def _nothing() -> list:
    return []


class AnalyticsService:
    """
    Builds the team performance and restaurant analytics reports.

    Each call fetches a fresh snapshot from Square; nothing is cached between
    calls. Any upstream failure aborts the whole report.
    """

    def __init__(
        self,
        orders: OrderRepositoryProtocol,
        payments: PaymentRepositoryProtocol,
        team: TeamRepositoryProtocol,
        locations: LocationRepositoryProtocol,
        *,
        location_id: str,
        tz: tzinfo = timezone.utc,
        classifier: Optional[Classifier] = None,
        top_n: int = TOP_ITEMS_LIMIT,
        attribute_by_payments: bool = False,
    ):
        self.orders = orders
        self.payments = payments
        self.team = team
        self.locations = locations
        self.location_id = location_id
        self.tz = tz
        self.classifier = classifier
        self.top_n = top_n
        self.attribute_by_payments = attribute_by_payments

    def _filters(
        self, start: datetime, end: datetime, team_member_id: Optional[str] = None
    ) -> ReportFilters:
        return ReportFilters(
            start_date=start,
            end_date=end,
            location_id=self.location_id,
            team_member_id=team_member_id,
        )

    async def compute_metrics(
        self,
        start: datetime,
        end: datetime,
        team_member_id: Optional[str] = None,
    ) -> PerformanceReport:
        """Performance report for the period, optionally for one team member."""
        filters = self._filters(start, end, team_member_id)
        if filters.is_inverted:
            metrics_logger.warning(
                "Inverted date range, skipping upstream fetch",
                start=start.isoformat(),
                end=end.isoformat(),
            )
            return build_performance_report(aggregate([], filters.date_range))

        member = filters.specific_team_member
        batch, timecards, members, payments = await _gather_or_cancel(
            self.orders.search(filters),
            self.team.timecards(filters, [member] if member else None),
            self.team.list_members(),
            self.payments.get_for_period(filters) if self.attribute_by_payments else _nothing(),
        )

        scoped = filter_by_team_member(batch.orders, member, payments)
        if member:
            metrics_logger.info(
                "Filtered orders by team member",
                team_member_id=member,
                before=len(batch.orders),
                after=len(scoped),
            )

        metrics = aggregate(
            scoped,
            filters.date_range,
            tz=self.tz,
            classifier=self.classifier,
            team_member_names={m.id: m.name for m in members},
            payment_attribution={
                p.order_id: p.team_member_id for p in payments if p.order_id and p.team_member_id
            },
            credit_to=member,
            top_n=self.top_n,
        )
        report = build_performance_report(
            metrics,
            summarize_timecards(timecards),
            DataQuality(truncated=batch.truncated, pages_fetched=batch.pages),
        )
        metrics_logger.info(
            "Performance report computed",
            net_sales=str(report.net_sales),
            covers=report.cover_count,
            truncated=batch.truncated,
        )
        return report

    async def compute_analytics(self, start: datetime, end: datetime) -> RestaurantAnalyticsReport:
        """Restaurant-wide analytics report for the period."""
        filters = self._filters(start, end)
        if filters.is_inverted:
            metrics_logger.warning(
                "Inverted date range, skipping upstream fetch",
                start=start.isoformat(),
                end=end.isoformat(),
            )
            return build_analytics_report(aggregate([], filters.date_range))

        batch = await self.orders.search(filters)
        metrics = aggregate(
            batch.orders,
            filters.date_range,
            tz=self.tz,
            classifier=self.classifier,
            top_n=self.top_n,
        )
        report = build_analytics_report(
            metrics, DataQuality(truncated=batch.truncated, pages_fetched=batch.pages)
        )
        metrics_logger.info(
            "Restaurant analytics computed",
            net_sales=str(report.net_sales),
            covers=report.total_covers,
            truncated=batch.truncated,
        )
        return report

    async def list_team_members(self) -> list[TeamMember]:
        return await self.team.list_members()

    async def list_locations(self) -> list[Location]:
        return await self.locations.get_all()

    async def location_name(self) -> Optional[str]:
        for location in await self.locations.get_all():
            if location.id == self.location_id:
                return location.name
        return None

    async def team_member_label(self, team_member_id: Optional[str]) -> str:
        """Display name used in exports: the member's name, or the whole team."""
        if not team_member_id or team_member_id == ALL_TEAM_MEMBERS:
            return "All Team Members"
        for member in await self.team.list_members():
            if member.id == team_member_id:
                return member.name
        return "Unknown"
