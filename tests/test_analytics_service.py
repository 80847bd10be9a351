import asyncio
import gc
from decimal import Decimal

import pytest

from app.domain.models import Payment
from app.infra.square_client import UpstreamFetchError
from app.services.analytics_service import AnalyticsService
from tests.conftest import (
    FakeLocationRepository,
    FakeOrderRepository,
    FakePaymentRepository,
    FakeTeamRepository,
)
from tests.factories import make_order, utc


@pytest.mark.asyncio
async def test_compute_metrics_for_whole_team(service, march_period):
    report = await service.compute_metrics(*march_period)

    assert report.net_sales == Decimal("80.00")
    assert report.cover_count == 3
    assert report.average_per_cover == Decimal("26.67")
    assert report.average_order_value == report.average_per_cover
    assert report.total_hours == 10.0
    assert report.total_shifts == 2
    assert report.sales_per_hour == Decimal("8.00")
    assert report.beer_sold == 5
    assert report.desserts_sold == 1
    assert report.cocktails_sold == 1
    assert [m.name for m in report.team_member_sales] == ["Ana Lima", "Bo Chen"]
    assert report.data_quality.pages_fetched == 1
    assert report.data_quality.truncated is False


@pytest.mark.asyncio
async def test_compute_metrics_for_one_team_member(service, fake_repos, march_period):
    report = await service.compute_metrics(*march_period, team_member_id="tm_bo")

    assert report.net_sales == Decimal("15.00")
    assert report.cover_count == 1
    assert [m.team_member_id for m in report.team_member_sales] == ["tm_bo"]
    assert fake_repos["team"].timecard_calls == [["tm_bo"]]


@pytest.mark.asyncio
async def test_shared_order_is_credited_to_the_filtered_member(fake_repos, march_period):
    fake_repos["orders"] = FakeOrderRepository(
        [make_order("o1", "2024-03-01T12:00:00Z", 1000, team_member_ids=["tm_ana", "tm_bo"])]
    )
    service = AnalyticsService(**_repos_kwargs(fake_repos), location_id="L1")

    report = await service.compute_metrics(*march_period, team_member_id="tm_bo")

    assert report.cover_count == 1
    assert [(m.team_member_id, m.name, m.sales) for m in report.team_member_sales] == [
        ("tm_bo", "Bo Chen", Decimal("10.00"))
    ]

@pytest.mark.asyncio
async def test_unknown_team_member_yields_zero_covers(service, march_period):
    report = await service.compute_metrics(*march_period, team_member_id="tm_ghost")

    assert report.cover_count == 0
    assert report.net_sales == 0
    assert report.team_member_sales == []


@pytest.mark.asyncio
async def test_team_member_label(service):
    assert await service.team_member_label(None) == "All Team Members"
    assert await service.team_member_label("tm_bo") == "Bo Chen"
    assert await service.team_member_label("tm_ghost") == "Unknown"


@pytest.mark.asyncio
async def test_all_team_members_is_not_a_filter(service, fake_repos, march_period):
    report = await service.compute_metrics(*march_period, team_member_id="all")
    assert report.cover_count == 3
    assert fake_repos["team"].timecard_calls == [None]


@pytest.mark.asyncio
async def test_inverted_range_skips_upstream(service, fake_repos):
    report = await service.compute_metrics(utc(2024, 3, 5), utc(2024, 3, 1))
    analytics = await service.compute_analytics(utc(2024, 3, 5), utc(2024, 3, 1))

    assert report.net_sales == 0
    assert report.top_items == []
    assert analytics.total_covers == 0
    assert fake_repos["orders"].calls == []
    assert fake_repos["team"].member_calls == 0
    assert fake_repos["team"].timecard_calls == []


@pytest.mark.asyncio
async def test_truncation_is_reported(fake_repos, march_period, sample_orders):
    fake_repos["orders"] = FakeOrderRepository(sample_orders, truncated=True, pages=20)
    service = AnalyticsService(**_repos_kwargs(fake_repos), location_id="L1")

    report = await service.compute_analytics(*march_period)

    assert report.data_quality.truncated is True
    assert report.data_quality.pages_fetched == 20


@pytest.mark.asyncio
async def test_upstream_reads_run_concurrently(team_members, march_period):
    timecards_started = asyncio.Event()

    class WaitingOrders(FakeOrderRepository):
        async def search(self, filters):
            # only completes if the timecard read is already in flight
            await asyncio.wait_for(timecards_started.wait(), timeout=1)
            return await super().search(filters)

    class SignallingTeam(FakeTeamRepository):
        async def timecards(self, filters, team_member_ids=None):
            timecards_started.set()
            return await super().timecards(filters, team_member_ids)

    service = AnalyticsService(
        WaitingOrders([make_order("o1", "2024-03-01T12:00:00Z", 1000)]),
        FakePaymentRepository(),
        SignallingTeam(team_members),
        FakeLocationRepository(),
        location_id="L1",
    )

    report = await service.compute_metrics(*march_period)
    assert report.cover_count == 1


@pytest.mark.asyncio
async def test_failure_cancels_sibling_reads(team_members, march_period):
    team = FakeTeamRepository(team_members, delay=10)
    service = AnalyticsService(
        FakeOrderRepository(error=UpstreamFetchError(500, "orders failed")),
        FakePaymentRepository(),
        team,
        FakeLocationRepository(),
        location_id="L1",
    )

    with pytest.raises(UpstreamFetchError):
        await service.compute_metrics(*march_period)

    for _ in range(3):
        await asyncio.sleep(0)
    assert team.cancelled is True


@pytest.mark.asyncio
async def test_second_failure_is_retrieved(team_members, march_period):
    class FailingTeam(FakeTeamRepository):
        async def timecards(self, filters, team_member_ids=None):
            await asyncio.sleep(0)
            raise UpstreamFetchError(503, "labor failed")

    service = AnalyticsService(
        FakeOrderRepository(error=UpstreamFetchError(500, "orders failed")),
        FakePaymentRepository(),
        FailingTeam(team_members),
        FakeLocationRepository(),
        location_id="L1",
    )
    unhandled = []
    loop = asyncio.get_running_loop()
    loop.set_exception_handler(lambda _, context: unhandled.append(context))
    try:
        with pytest.raises(UpstreamFetchError):
            await service.compute_metrics(*march_period)
        gc.collect()
        await asyncio.sleep(0)
    finally:
        loop.set_exception_handler(None)

    assert unhandled == []


@pytest.mark.asyncio
async def test_payments_fetched_only_when_attribution_enabled(fake_repos, march_period):
    orders = [make_order("o1", "2024-03-01T12:00:00Z", 1800)]
    fake_repos["orders"] = FakeOrderRepository(orders)
    fake_repos["payments"] = FakePaymentRepository(
        [Payment(id="p1", order_id="o1", team_member_id="tm_bo")]
    )

    plain = AnalyticsService(**_repos_kwargs(fake_repos), location_id="L1")
    report = await plain.compute_metrics(*march_period)
    assert report.team_member_sales == []
    assert fake_repos["payments"].calls == []

    by_payments = AnalyticsService(
        **_repos_kwargs(fake_repos), location_id="L1", attribute_by_payments=True
    )
    report = await by_payments.compute_metrics(*march_period, team_member_id="tm_bo")
    assert [(m.team_member_id, m.sales) for m in report.team_member_sales] == [
        ("tm_bo", Decimal("18.00"))
    ]
    assert len(fake_repos["payments"].calls) == 1


@pytest.mark.asyncio
async def test_compute_analytics_splits(service, march_period):
    report = await service.compute_analytics(*march_period)

    assert report.net_sales == Decimal("80.00")
    assert report.total_covers == 3
    assert report.total_transactions == 3
    assert report.average_order_value == Decimal("26.67")
    assert (report.lunch.covers, report.happy_hour.covers, report.dinner.covers) == (1, 1, 1)
    assert report.category_sales.beer == Decimal("35.00")
    assert report.channel_sales.square_online == Decimal("40.00")


@pytest.mark.asyncio
async def test_location_name(service):
    assert await service.location_name() == "Taproom"


def _repos_kwargs(repos: dict) -> dict:
    return {
        "orders": repos["orders"],
        "payments": repos["payments"],
        "team": repos["team"],
        "locations": repos["locations"],
    }
