"""
Team repository.
Team members and their timecards (used for sales per labor hour).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from app.domain.filters import ReportFilters
from app.domain.models import TeamMember, Timecard
from app.infra.pagination import DEFAULT_MAX_PAGES, fetch_all_pages

if TYPE_CHECKING:
    from app.repositories.protocols import SquareClientProtocol


class TeamRepository:
    """
    Repository for Square team and labor data.
    """

    def __init__(
        self,
        client: "SquareClientProtocol",
        location_id: str,
        *,
        max_pages: int = DEFAULT_MAX_PAGES,
    ):
        self.client = client
        self.location_id = location_id
        self.max_pages = max_pages

    async def list_members(self) -> list[TeamMember]:
        """
        Active team members assigned to the location.

        Returns:
            Team members in the order Square returned them
        """

        async def fetch_page(cursor: Optional[str]) -> dict:
            body: dict = {
                "query": {
                    "filter": {
                        "location_ids": [self.location_id],
                        "status": "ACTIVE",
                    }
                }
            }
            if cursor:
                body["cursor"] = cursor
            return await self.client.search_team_members(body)

        paged = await fetch_all_pages(
            fetch_page, "team_members", max_pages=self.max_pages, label="team_members"
        )
        return [TeamMember.from_payload(raw) for raw in paged.items]

    async def timecards(
        self,
        filters: ReportFilters,
        team_member_ids: Optional[Sequence[str]] = None,
    ) -> list[Timecard]:
        """
        Timecards whose shift started inside the period.

        Args:
            filters: Filters to apply
            team_member_ids: Restrict to these members (all when omitted)
        """

        async def fetch_page(cursor: Optional[str]) -> dict:
            return await self.client.search_timecards(
                filters.to_timecard_search(team_member_ids, cursor)
            )

        paged = await fetch_all_pages(
            fetch_page, "timecards", max_pages=self.max_pages, label="timecards"
        )
        return [Timecard.from_payload(raw) for raw in paged.items]
