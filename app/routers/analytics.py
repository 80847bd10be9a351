"""Restaurant-wide analytics endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.domain.models import DateRange, RestaurantAnalyticsReport, TimeBucketSales
from app.routers.performance import DataQualityRow
from app.routers.periods import resolve_period
from app.services.analytics_service import AnalyticsService
from app.services.dependencies import get_analytics_service
from app.services.report_assembler import export_document, export_filename


router = APIRouter(prefix="/analytics", tags=["analytics"])


# -----------------------------------------------------------------------------
# Response Models
# -----------------------------------------------------------------------------


class TimeBucketRow(BaseModel):
    covers: int
    sales: float

    @classmethod
    def from_bucket(cls, bucket: TimeBucketSales) -> "TimeBucketRow":
        return cls(covers=bucket.covers, sales=float(bucket.sales))


class CategorySalesRow(BaseModel):
    kickstarters: float
    beer: float
    drinks: float
    merch: float
    desserts: float
    spirits: float


class ChannelSalesRow(BaseModel):
    square_online: float
    door_dash: float
    in_store: float


class RestaurantAnalyticsResponse(BaseModel):
    """Restaurant analytics response model."""
    net_sales: float
    total_covers: int
    average_order_value: float
    total_transactions: int
    lunch: TimeBucketRow
    happy_hour: TimeBucketRow
    dinner: TimeBucketRow
    category_sales: CategorySalesRow
    channel_sales: ChannelSalesRow
    data_quality: DataQualityRow

    @classmethod
    def from_report(cls, report: RestaurantAnalyticsReport) -> "RestaurantAnalyticsResponse":
        categories = report.category_sales
        channels = report.channel_sales
        quality = report.data_quality
        return cls(
            net_sales=float(report.net_sales),
            total_covers=report.total_covers,
            average_order_value=float(report.average_order_value),
            total_transactions=report.total_transactions,
            lunch=TimeBucketRow.from_bucket(report.lunch),
            happy_hour=TimeBucketRow.from_bucket(report.happy_hour),
            dinner=TimeBucketRow.from_bucket(report.dinner),
            category_sales=CategorySalesRow(
                kickstarters=float(categories.kickstarters),
                beer=float(categories.beer),
                drinks=float(categories.drinks),
                merch=float(categories.merch),
                desserts=float(categories.desserts),
                spirits=float(categories.spirits),
            ),
            channel_sales=ChannelSalesRow(
                square_online=float(channels.square_online),
                door_dash=float(channels.door_dash),
                in_store=float(channels.in_store),
            ),
            data_quality=DataQualityRow(
                unclassified_items=quality.unclassified_items,
                unclassified_channels=quality.unclassified_channels,
                truncated=quality.truncated,
                pages_fetched=quality.pages_fetched,
            ),
        )


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("/restaurant", response_model=RestaurantAnalyticsResponse)
async def get_restaurant_analytics(
    start: Optional[str] = Query(None, description="Start date/time (ISO8601)"),
    end: Optional[str] = Query(None, description="End date/time (ISO8601)"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Totals, lunch/happy hour/dinner split, category and channel sales."""
    start_dt, end_dt = resolve_period(start, end, service.tz)
    report = await service.compute_analytics(start_dt, end_dt)
    return RestaurantAnalyticsResponse.from_report(report)


@router.get("/restaurant/export")
async def export_restaurant_analytics(
    start: Optional[str] = Query(None, description="Start date/time (ISO8601)"),
    end: Optional[str] = Query(None, description="End date/time (ISO8601)"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Restaurant analytics as a downloadable JSON document."""
    start_dt, end_dt = resolve_period(start, end, service.tz)
    report = await service.compute_analytics(start_dt, end_dt)
    document = export_document(report, DateRange(start_dt, end_dt), await service.location_name())
    filename = export_filename("restaurant-analytics")
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
