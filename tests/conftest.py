import asyncio
from typing import Optional

import pytest

from app.core.config import settings
from app.domain.filters import ReportFilters
from app.domain.models import Location, Payment, TeamMember, Timecard
from app.repositories.order_repository import OrderBatch
from app.services.analytics_service import AnalyticsService
from tests.factories import line_item, make_order, utc


# -----------------------------------------------------------------------------
# In-memory repositories
# -----------------------------------------------------------------------------


class FakeOrderRepository:
    def __init__(self, orders=None, *, truncated=False, pages=1, error=None, delay=0.0):
        self.orders = list(orders or [])
        self.truncated = truncated
        self.pages = pages
        self.error = error
        self.delay = delay
        self.calls: list[ReportFilters] = []

    async def search(self, filters: ReportFilters) -> OrderBatch:
        self.calls.append(filters)
        await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return OrderBatch(orders=list(self.orders), pages=self.pages, truncated=self.truncated)


class FakePaymentRepository:
    def __init__(self, payments=None):
        self.payments = list(payments or [])
        self.calls: list[ReportFilters] = []

    async def get_for_period(self, filters: ReportFilters) -> list[Payment]:
        self.calls.append(filters)
        return list(self.payments)


class FakeTeamRepository:
    def __init__(self, members=None, timecards=None, *, delay=0.0):
        self.members = list(members or [])
        self.cards = list(timecards or [])
        self.delay = delay
        self.member_calls = 0
        self.timecard_calls: list[Optional[list]] = []
        self.cancelled = False

    async def list_members(self) -> list[TeamMember]:
        self.member_calls += 1
        return list(self.members)

    async def timecards(self, filters: ReportFilters, team_member_ids=None) -> list[Timecard]:
        self.timecard_calls.append(team_member_ids)
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return list(self.cards)


class FakeLocationRepository:
    def __init__(self, locations=None):
        self.locations = list(locations or [])

    async def get_all(self) -> list[Location]:
        return list(self.locations)


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def sample_orders():
    """Three orders on two days: lunch, happy hour and a late dinner."""
    return [
        make_order(
            "o1",
            "2024-03-01T12:30:00Z",
            2500,
            items=[line_item("Draft IPA", 1400, "2"), line_item("Nachos", 1100)],
            team_member_ids=["tm_ana"],
            source="Square Point of Sale",
        ),
        make_order(
            "o2",
            "2024-03-01T16:00:00Z",
            1500,
            items=[line_item("Old Fashioned", 1200), line_item("Chocolate Cake", 300)],
            team_member_ids=["tm_bo"],
            source="DoorDash",
        ),
        make_order(
            "o3",
            "2024-03-02T20:15:00Z",
            4000,
            items=[line_item("Draft IPA", 2100, "3"), line_item("Trucker Hat", 1900)],
            team_member_ids=["tm_ana"],
            source="Square Online",
        ),
    ]


@pytest.fixture
def team_members():
    return [
        TeamMember(id="tm_ana", name="Ana Lima", role="Server", status="ACTIVE"),
        TeamMember(id="tm_bo", name="Bo Chen", role="Bartender", status="ACTIVE"),
    ]


@pytest.fixture
def march_period():
    return utc(2024, 3, 1), utc(2024, 3, 3)


@pytest.fixture
def fake_repos(sample_orders, team_members):
    timecards = [
        Timecard(team_member_id="tm_ana", start_at=utc(2024, 3, 1, 11), end_at=utc(2024, 3, 1, 19)),
        Timecard(team_member_id="tm_bo", start_at=utc(2024, 3, 1, 15), end_at=utc(2024, 3, 1, 17)),
    ]
    return {
        "orders": FakeOrderRepository(sample_orders),
        "payments": FakePaymentRepository(),
        "team": FakeTeamRepository(team_members, timecards),
        "locations": FakeLocationRepository([Location(id="L1", name="Taproom")]),
    }


@pytest.fixture
def service(fake_repos):
    return AnalyticsService(
        fake_repos["orders"],
        fake_repos["payments"],
        fake_repos["team"],
        fake_repos["locations"],
        location_id="L1",
    )


@pytest.fixture
def square_credentials(monkeypatch):
    """Configure Square credentials on the shared settings object."""
    monkeypatch.setattr(settings, "SQUARE_ACCESS_TOKEN", "test-token")
    monkeypatch.setattr(settings, "SQUARE_LOCATION_ID", "L1")
    monkeypatch.setattr(settings, "SQUARE_ENVIRONMENT", "sandbox")
    return settings


@pytest.fixture
def no_square_credentials(monkeypatch):
    monkeypatch.setattr(settings, "SQUARE_ACCESS_TOKEN", None)
    monkeypatch.setattr(settings, "SQUARE_LOCATION_ID", None)
    return settings
