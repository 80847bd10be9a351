"""Team performance endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.domain.models import DateRange, PerformanceReport
from app.routers.periods import resolve_period
from app.services.analytics_service import AnalyticsService
from app.services.dependencies import get_analytics_service
from app.services.report_assembler import export_document, export_filename


router = APIRouter(prefix="/performance", tags=["performance"])


# -----------------------------------------------------------------------------
# Response Models
# -----------------------------------------------------------------------------


class DailyPerformanceRow(BaseModel):
    date: str
    sales: float
    covers: int


class TopItemRow(BaseModel):
    name: str
    quantity: int
    revenue: float


class TeamMemberSalesRow(BaseModel):
    team_member_id: str
    name: str
    sales: float


class DataQualityRow(BaseModel):
    unclassified_items: int = 0
    unclassified_channels: int = 0
    truncated: bool = False
    pages_fetched: int = 0


class PerformanceResponse(BaseModel):
    """Performance report response model."""
    net_sales: float
    cover_count: int
    ppa: float
    sales_per_hour: float
    total_hours: float
    total_shifts: int
    daily_performance: list[DailyPerformanceRow]
    top_items: list[TopItemRow]
    team_member_sales: list[TeamMemberSalesRow]
    desserts_sold: int
    beer_sold: int
    cocktails_sold: int
    average_order_value: float
    data_quality: DataQualityRow

    @classmethod
    def from_report(cls, report: PerformanceReport) -> "PerformanceResponse":
        return cls(
            net_sales=float(report.net_sales),
            cover_count=report.cover_count,
            ppa=float(report.average_per_cover),
            sales_per_hour=float(report.sales_per_hour),
            total_hours=report.total_hours,
            total_shifts=report.total_shifts,
            daily_performance=[
                DailyPerformanceRow(date=d.date, sales=float(d.sales), covers=d.covers)
                for d in report.daily_performance
            ],
            top_items=[
                TopItemRow(name=i.name, quantity=i.quantity, revenue=float(i.revenue))
                for i in report.top_items
            ],
            team_member_sales=[
                TeamMemberSalesRow(
                    team_member_id=m.team_member_id, name=m.name, sales=float(m.sales)
                )
                for m in report.team_member_sales
            ],
            desserts_sold=report.desserts_sold,
            beer_sold=report.beer_sold,
            cocktails_sold=report.cocktails_sold,
            average_order_value=float(report.average_order_value),
            data_quality=DataQualityRow(
                unclassified_items=report.data_quality.unclassified_items,
                unclassified_channels=report.data_quality.unclassified_channels,
                truncated=report.data_quality.truncated,
                pages_fetched=report.data_quality.pages_fetched,
            ),
        )


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("", response_model=PerformanceResponse)
async def get_performance(
    start: Optional[str] = Query(None, description="Start date/time (ISO8601)"),
    end: Optional[str] = Query(None, description="End date/time (ISO8601)"),
    team_member_id: Optional[str] = Query(None, description="Team member id or 'all'"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Net sales, covers, PPA, daily series and rankings for the period."""
    start_dt, end_dt = resolve_period(start, end, service.tz)
    report = await service.compute_metrics(start_dt, end_dt, team_member_id)
    return PerformanceResponse.from_report(report)


@router.get("/export")
async def export_performance(
    start: Optional[str] = Query(None, description="Start date/time (ISO8601)"),
    end: Optional[str] = Query(None, description="End date/time (ISO8601)"),
    team_member_id: Optional[str] = Query(None, description="Team member id or 'all'"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Performance report as a downloadable JSON document."""
    start_dt, end_dt = resolve_period(start, end, service.tz)
    report = await service.compute_metrics(start_dt, end_dt, team_member_id)
    document = export_document(
        report,
        DateRange(start_dt, end_dt),
        await service.location_name(),
        team_member=await service.team_member_label(team_member_id),
    )
    filename = export_filename("performance-report")
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
