"""
Payment repository.
Payments are the second route for attributing orders to team members.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from app.domain.filters import ReportFilters
from app.domain.models import Payment
from app.infra.pagination import DEFAULT_MAX_PAGES, fetch_all_pages

if TYPE_CHECKING:
    from app.repositories.protocols import SquareClientProtocol


class PaymentRepository:
    """Repository for Square payments."""

    def __init__(self, client: "SquareClientProtocol", *, max_pages: int = DEFAULT_MAX_PAGES):
        self.client = client
        self.max_pages = max_pages

    async def get_for_period(self, filters: ReportFilters) -> list[Payment]:
        """Payments taken at the location during the period."""

        async def fetch_page(cursor: Optional[str]) -> dict:
            return await self.client.list_payments(filters.to_payment_params(cursor))

        paged = await fetch_all_pages(
            fetch_page, "payments", max_pages=self.max_pages, label="payments"
        )
        return [Payment.from_payload(raw) for raw in paged.items]
