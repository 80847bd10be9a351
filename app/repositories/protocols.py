"""Protocol definitions for the upstream client and the repositories built on it."""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence

from app.domain.filters import ReportFilters
from app.domain.models import Location, Payment, TeamMember, Timecard
from app.repositories.order_repository import OrderBatch


class SquareClientProtocol(Protocol):
    """What the repositories need from the Square client."""

    async def search_orders(self, body: Dict[str, Any]) -> Dict[str, Any]: ...

    async def search_team_members(self, body: Dict[str, Any]) -> Dict[str, Any]: ...

    async def list_locations(self) -> Dict[str, Any]: ...

    async def list_payments(self, params: Dict[str, Any]) -> Dict[str, Any]: ...

    async def search_timecards(self, body: Dict[str, Any]) -> Dict[str, Any]: ...


class OrderRepositoryProtocol(Protocol):
    """Contract for order data access."""

    async def search(self, filters: ReportFilters) -> OrderBatch: ...


class PaymentRepositoryProtocol(Protocol):
    """Contract for payment data access."""

    async def get_for_period(self, filters: ReportFilters) -> list[Payment]: ...


class TeamRepositoryProtocol(Protocol):
    """Contract for team member and labor data access."""

    async def list_members(self) -> list[TeamMember]: ...

    async def timecards(
        self, filters: ReportFilters, team_member_ids: Optional[Sequence[str]] = None
    ) -> list[Timecard]: ...


class LocationRepositoryProtocol(Protocol):
    """Contract for location data access."""

    async def get_all(self) -> list[Location]: ...
