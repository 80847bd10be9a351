"""
Repositories for upstream data access.
Each one turns Square API responses into domain models.
"""

from .order_repository import OrderBatch, OrderRepository
from .payment_repository import PaymentRepository
from .team_repository import TeamRepository
from .location_repository import LocationRepository

__all__ = [
    "OrderBatch",
    "OrderRepository",
    "PaymentRepository",
    "TeamRepository",
    "LocationRepository",
]
