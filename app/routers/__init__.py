"""API routers module."""

from . import analytics, health, performance, team

__all__ = [
    "analytics",
    "health",
    "performance",
    "team",
]
