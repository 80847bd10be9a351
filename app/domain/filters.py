"""
Report filters.
Holds the request parameters of one report and turns them into Square
search bodies, plus the team-member narrowing applied after the fetch.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from app.domain.models import DateRange, Order, Payment

ALL_TEAM_MEMBERS = "all"


def _iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ReportFilters:
    """
    Parameters shared by every upstream query of a report.
    The date range is passed to Square as-is (start inclusive, end exclusive).
    """

    start_date: datetime
    end_date: datetime
    location_id: str
    team_member_id: Optional[str] = None
    order_states: Sequence[str] = ("COMPLETED",)

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def is_inverted(self) -> bool:
        return self.date_range.is_inverted

    @property
    def specific_team_member(self) -> Optional[str]:
        """The requested team member, or None for the whole team."""
        if not self.team_member_id or self.team_member_id == ALL_TEAM_MEMBERS:
            return None
        return self.team_member_id

    def to_order_search(self, limit: int, cursor: Optional[str] = None) -> dict:
        """
        Body for POST /orders/search.

        Returns:
            Dict ready to be sent as JSON
        """
        body: dict = {
            "location_ids": [self.location_id],
            "query": {
                "filter": {
                    "date_time_filter": {
                        "created_at": {
                            "start_at": _iso(self.start_date),
                            "end_at": _iso(self.end_date),
                        }
                    },
                    "state_filter": {"states": list(self.order_states)},
                },
                "sort": {"sort_field": "CREATED_AT", "sort_order": "ASC"},
            },
            "limit": limit,
        }
        if cursor:
            body["cursor"] = cursor
        return body

    def to_payment_params(self, cursor: Optional[str] = None) -> dict:
        """Query parameters for GET /payments."""
        params = {
            "begin_time": _iso(self.start_date),
            "end_time": _iso(self.end_date),
            "location_id": self.location_id,
            "sort_order": "ASC",
        }
        if cursor:
            params["cursor"] = cursor
        return params

    def to_timecard_search(
        self,
        team_member_ids: Optional[Sequence[str]] = None,
        cursor: Optional[str] = None,
    ) -> dict:
        """Body for POST /labor/timecards/search."""
        query_filter: dict = {
            "location_ids": [self.location_id],
            "start": {
                "start_at": _iso(self.start_date),
                "end_at": _iso(self.end_date),
            },
        }
        if team_member_ids:
            query_filter["team_member_ids"] = list(team_member_ids)
        body: dict = {"query": {"filter": query_filter}, "limit": 200}
        if cursor:
            body["cursor"] = cursor
        return body


def filter_by_team_member(
    orders: Sequence[Order],
    team_member_id: Optional[str],
    payments: Optional[Iterable[Payment]] = None,
) -> list[Order]:
    """
    Keep the orders attributable to one team member, preserving order.

    An order matches when any entry of any fulfillment names the member.
    When payments are given they act as a second route: an order referenced
    by a payment the member took is kept too. Orders with no attribution are
    dropped. No member (or "all") returns the input unchanged.
    """
    if not team_member_id or team_member_id == ALL_TEAM_MEMBERS:
        return list(orders)

    paid_order_ids = {
        p.order_id
        for p in (payments or ())
        if p.order_id and p.team_member_id == team_member_id
    }

    return [
        order
        for order in orders
        if team_member_id in order.team_member_ids or order.id in paid_order_ids
    ]
