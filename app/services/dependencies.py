"""FastAPI dependency providers for the service layer."""

from fastapi import Depends, Request

from app.core.config import ConfigError, require_square_credentials, settings
from app.domain.normalizer import resolve_timezone
from app.infra.square_client import SquareClient
from app.repositories.location_repository import LocationRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.payment_repository import PaymentRepository
from app.repositories.team_repository import TeamRepository
from app.services.analytics_service import AnalyticsService


def get_square_client(request: Request) -> SquareClient:
    client = getattr(request.app.state, "square_client", None)
    if client is None:
        # lifespan could not build it; re-check to report what is missing
        require_square_credentials(settings)
        raise ConfigError("Square client is not initialized")
    return client


def get_analytics_service(client: SquareClient = Depends(get_square_client)) -> AnalyticsService:
    _, location_id = require_square_credentials(settings)
    return AnalyticsService(
        OrderRepository(
            client,
            page_limit=settings.ORDERS_PAGE_LIMIT,
            max_pages=settings.ORDERS_MAX_PAGES,
        ),
        PaymentRepository(client, max_pages=settings.ORDERS_MAX_PAGES),
        TeamRepository(client, location_id, max_pages=settings.ORDERS_MAX_PAGES),
        LocationRepository(client),
        location_id=location_id,
        tz=resolve_timezone(settings.REPORT_TIMEZONE),
        top_n=settings.TOP_ITEMS_LIMIT,
        attribute_by_payments=settings.ATTRIBUTE_BY_PAYMENTS,
    )
