"""
Location repository.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.domain.models import Location

if TYPE_CHECKING:
    from app.repositories.protocols import SquareClientProtocol


class LocationRepository:
    """Repository for the merchant's Square locations."""

    def __init__(self, client: "SquareClientProtocol"):
        self.client = client

    async def get_all(self) -> list[Location]:
        data = await self.client.list_locations()
        return [Location.from_payload(raw) for raw in data.get("locations") or []]
