"""
Kitchen analytics Pydantic schemas.

This module defines the analytics request and the report read-models
returned by the analytics engine: time series, summary, performance metrics,
item insights, revenue insights and customer insights, plus the daily sales
report and the admin order snapshot.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ReportModel(BaseModel):
    """Immutable base for report values."""

    model_config = ConfigDict(frozen=True)


class AnalyticsRequest(BaseModel):
    """Analytics window and time-series granularity."""

    model_config = ConfigDict(str_strip_whitespace=True)

    start: datetime = Field(..., description="Period start (inclusive)")
    end: datetime = Field(..., description="Period end (exclusive)")
    group_by: str = Field(
        default="day",
        description="Time-series granularity: hour, day or month",
    )

    @field_validator("start", "end")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Interpret naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @model_validator(mode="after")
    def validate_period(self) -> "AnalyticsRequest":
        """Reject empty or inverted periods."""
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class TimeSeriesPoint(ReportModel):
    """Orders and revenue of one time bucket."""

    period: datetime = Field(..., description="Bucket start (inclusive)")
    period_end: datetime = Field(..., description="Bucket end (exclusive)")
    order_count: int = 0
    revenue: Decimal = Decimal("0")


class AnalyticsSummary(ReportModel):
    """Headline totals for the period."""

    total_orders: int
    total_revenue: Decimal
    average_order_value: Decimal
    total_items_sold: int
    change_vs_previous: Optional[Decimal] = Field(
        None,
        description="Order count change vs the preceding period, in percent",
    )


class PeakHour(ReportModel):
    hour: int = Field(..., ge=0, le=23)
    order_count: int


class BestDay(ReportModel):
    """Busiest weekday.

    ``avg_orders`` is the number of orders placed on that weekday within the
    period, not a per-week mean.
    """

    day_name: str
    avg_orders: Decimal


class PerformanceMetrics(ReportModel):
    peak_hour: Optional[PeakHour] = None
    best_day_of_week: Optional[BestDay] = None
    completion_rate: Decimal
    completed_orders: int
    cancelled_orders: int
    avg_items_per_order: Decimal


class ItemInsight(ReportModel):
    menu_item_id: Optional[UUID] = None
    name: str
    quantity: int


class ItemInsights(ReportModel):
    most_sold: Optional[ItemInsight] = None
    least_sold: Optional[ItemInsight] = None
    morning_bestseller: Optional[ItemInsight] = Field(
        None, description="Best seller between 06:00 and 12:00"
    )
    evening_bestseller: Optional[ItemInsight] = Field(
        None, description="Best seller between 17:00 and 22:00"
    )


class HourlyRevenue(ReportModel):
    """Orders and revenue for one hour of the day across the whole period."""

    hour: int = Field(..., ge=0, le=23)
    order_count: int = 0
    revenue: Decimal = Decimal("0")


class TopRevenueItem(ReportModel):
    menu_item_id: Optional[UUID] = None
    name: str
    revenue: Decimal
    quantity: int


class CategoryRevenue(ReportModel):
    category_name: str
    revenue: Decimal
    percentage: Decimal


class RevenueInsights(ReportModel):
    revenue_by_hour: list[HourlyRevenue]
    top_items_by_revenue: list[TopRevenueItem]
    category_breakdown: list[CategoryRevenue]


class CustomerInsights(ReportModel):
    unique_customers: int
    orders_per_customer: Decimal
    new_customers: int
    returning_customers: int
    new_customer_percentage: Decimal


class AnalyticsReport(ReportModel):
    """Complete kitchen analytics report for one period."""

    start: datetime
    end: datetime
    granularity: str
    include_cancelled: bool
    time_series: list[TimeSeriesPoint]
    summary: AnalyticsSummary
    performance: PerformanceMetrics
    items: ItemInsights
    revenue: RevenueInsights
    customers: CustomerInsights


class DailySalesRow(ReportModel):
    menu_item_id: Optional[UUID] = None
    name: str
    quantity_sold: int
    revenue: Decimal


class TopCustomer(ReportModel):
    user_id: UUID
    name: str
    email: str
    total_orders: int
    total_spent: Decimal


class AdminOrderSnapshot(ReportModel):
    """Order figures for the admin dashboard.

    ``orders_today`` excludes cancelled orders and ``revenue_today`` counts
    completed orders only; both differ on purpose from the kitchen analytics
    totals.
    """

    day: date
    orders_today: int
    revenue_today: Decimal
    top_customers: list[TopCustomer]
