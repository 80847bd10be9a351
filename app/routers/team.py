"""Team member and location listing endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.services.analytics_service import AnalyticsService
from app.services.dependencies import get_analytics_service


router = APIRouter(tags=["team"])


# -----------------------------------------------------------------------------
# Response Models
# -----------------------------------------------------------------------------


class TeamMemberRow(BaseModel):
    """Team member list response model."""
    id: str
    name: str
    role: str
    status: Optional[str] = None


class LocationRow(BaseModel):
    """Location list response model."""
    id: str
    name: str
    status: Optional[str] = None
    timezone: Optional[str] = None


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("/team-members", response_model=list[TeamMemberRow])
async def get_team_members(service: AnalyticsService = Depends(get_analytics_service)):
    """Active team members of the configured location."""
    members = await service.list_team_members()
    return [
        TeamMemberRow(id=m.id, name=m.name, role=m.role, status=m.status)
        for m in members
    ]


@router.get("/locations", response_model=list[LocationRow])
async def get_locations(service: AnalyticsService = Depends(get_analytics_service)):
    """Locations visible to the access token."""
    locations = await service.list_locations()
    return [
        LocationRow(id=loc.id, name=loc.name, status=loc.status, timezone=loc.timezone)
        for loc in locations
    ]
