"""
Order repository.
Fetches the orders of a report period from Square, following cursors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from app.core.logging import square_logger
from app.domain.filters import ReportFilters
from app.domain.models import Order
from app.infra.pagination import DEFAULT_MAX_PAGES, fetch_all_pages

if TYPE_CHECKING:
    from app.repositories.protocols import SquareClientProtocol

DEFAULT_PAGE_LIMIT = 500


@dataclass
class OrderBatch:
    """All orders fetched for one report, plus how complete the fetch was."""

    orders: list[Order] = field(default_factory=list)
    pages: int = 0
    truncated: bool = False


class OrderRepository:
    """
    Repository for Square order data.
    Encapsulates search body building and cursor pagination.
    """

    def __init__(
        self,
        client: "SquareClientProtocol",
        *,
        page_limit: int = DEFAULT_PAGE_LIMIT,
        max_pages: int = DEFAULT_MAX_PAGES,
    ):
        self.client = client
        self.page_limit = page_limit
        self.max_pages = max_pages

    async def search(self, filters: ReportFilters) -> OrderBatch:
        """
        Fetch every order of the period.

        Args:
            filters: Filters to apply

        Returns:
            OrderBatch with orders in the order Square returned them
        """

        async def fetch_page(cursor: Optional[str]) -> dict:
            return await self.client.search_orders(filters.to_order_search(self.page_limit, cursor))

        paged = await fetch_all_pages(
            fetch_page, "orders", max_pages=self.max_pages, label="orders"
        )
        orders = [Order.from_payload(raw) for raw in paged.items]

        square_logger.info(
            "Orders fetched",
            orders=len(orders),
            pages=paged.pages,
            truncated=paged.truncated,
        )
        return OrderBatch(orders=orders, pages=paged.pages, truncated=paged.truncated)
