"""
Tests for AnalyticsService.

The service runs against an in-memory repository holding the full order
history, so cross-period lookups (previous period count and prior orders of
in-period customers) are exercised end to end.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from campus_eats.core.config import Settings
from campus_eats.services.analytics.errors import (
    AnalyticsRepositoryError,
    AnalyticsValidationError,
)
from campus_eats.services.analytics.service import AnalyticsService, day_bounds
from campus_eats.services.orders.enums import OrderStatus

UTC = timezone.utc
TODAY = datetime(2024, 5, 15, tzinfo=UTC)


class InMemoryAnalyticsRepository:
    """Analytics repository double over a list of orders."""

    def __init__(self, orders, top_customers=()):
        self.orders = list(orders)
        self.top_customers = list(top_customers)
        self.count_calls = []

    def _between(self, start, end):
        return [o for o in self.orders if start <= o.order_date < end]

    async def fetch_orders(self, start, end):
        return sorted(self._between(start, end), key=lambda o: (o.order_date, o.id))

    async def fetch_order_count(self, start, end, exclude_cancelled=False):
        self.count_calls.append((start, end, exclude_cancelled))
        orders = self._between(start, end)
        if exclude_cancelled:
            orders = [o for o in orders if o.status != OrderStatus.CANCELLED]
        return len(orders)

    async def fetch_customers_with_prior_orders(self, customer_ids, before):
        ids = set(customer_ids)
        return {o.user_id for o in self.orders if o.user_id in ids and o.order_date < before}

    async def fetch_top_customers(self, limit=10):
        return self.top_customers[:limit]


@pytest.fixture
def settings() -> Settings:
    """Settings with analytics defaults."""
    return Settings(environment="test")


@pytest.fixture
def service_for(settings):
    """Build a service over an in-memory repository."""

    def _make(orders, settings=settings, **kwargs):
        service = AnalyticsService(MagicMock(spec=AsyncSession), settings=settings)
        service.repository = InMemoryAnalyticsRepository(orders, **kwargs)
        return service

    return _make


class TestGetReport:
    """Tests for the full analytics report."""

    @pytest.mark.asyncio
    async def test_returning_and_new_customers(self, service_for, make_order):
        x, y = uuid4(), uuid4()
        orders = [
            make_order(TODAY - timedelta(days=30), user_id=x),
            make_order(TODAY - timedelta(days=1), user_id=x),
            make_order(TODAY - timedelta(days=1), user_id=y),
        ]
        service = service_for(orders)

        report = await service.get_report(
            TODAY - timedelta(days=7), TODAY + timedelta(days=1), "day"
        )

        assert report.customers.unique_customers == 2
        assert report.customers.returning_customers == 1
        assert report.customers.new_customers == 1
        assert report.customers.new_customer_percentage == Decimal("50")

    @pytest.mark.asyncio
    async def test_working_set_is_half_open(self, service_for, make_order):
        start, end = TODAY - timedelta(days=1), TODAY
        orders = [
            make_order(start, total_amount=Decimal("1.00")),
            make_order(end, total_amount=Decimal("2.00")),
            make_order(start - timedelta(seconds=1), total_amount=Decimal("4.00")),
        ]

        report = await service_for(orders).get_report(start, end, "hour")

        assert report.summary.total_orders == 1
        assert report.summary.total_revenue == Decimal("1.00")
        assert len(report.time_series) == 24

    @pytest.mark.asyncio
    async def test_previous_period_count(self, service_for, make_order):
        start, end = TODAY - timedelta(days=7), TODAY
        orders = [
            make_order(start - timedelta(days=3)),
            make_order(start - timedelta(days=5)),
            make_order(start - timedelta(days=8)),
            make_order(start + timedelta(days=1)),
        ]
        service = service_for(orders)

        report = await service.get_report(start, end)

        assert service.repository.count_calls == [(start - timedelta(days=7), start, False)]
        assert report.summary.change_vs_previous == Decimal("-50")

    @pytest.mark.asyncio
    async def test_excluding_cancelled_applies_to_previous_period(self, service_for, make_order):
        start, end = TODAY - timedelta(days=7), TODAY
        orders = [
            make_order(start - timedelta(days=1), OrderStatus.CANCELLED),
            make_order(start - timedelta(days=2), OrderStatus.COMPLETED),
            make_order(start + timedelta(days=1), OrderStatus.COMPLETED),
            make_order(start + timedelta(days=2), OrderStatus.CANCELLED),
        ]
        service = service_for(
            orders,
            settings=Settings(environment="test", analytics_include_cancelled=False),
        )

        report = await service.get_report(start, end)

        assert service.repository.count_calls[0][2] is True
        assert report.summary.total_orders == 1
        assert report.summary.change_vs_previous == Decimal("0")
        assert report.performance.cancelled_orders == 1

    @pytest.mark.asyncio
    async def test_top_items_limit_from_settings(self, service_for, make_order, make_line, make_menu_item):
        items = [make_menu_item(f"Item {i}") for i in range(4)]
        orders = [make_order(TODAY, lines=[make_line(item) for item in items])]
        service = service_for(
            orders,
            settings=Settings(environment="test", analytics_top_items_limit=2),
        )

        report = await service.get_report(TODAY, TODAY + timedelta(days=1))

        assert len(report.revenue.top_items_by_revenue) == 2

    @pytest.mark.asyncio
    async def test_rejects_unknown_granularity(self, service_for):
        with pytest.raises(AnalyticsValidationError):
            await service_for([]).get_report(TODAY, TODAY + timedelta(days=1), "week")

    @pytest.mark.asyncio
    async def test_rejects_inverted_period(self, service_for):
        with pytest.raises(AnalyticsValidationError):
            await service_for([]).get_report(TODAY, TODAY - timedelta(days=1))

    @pytest.mark.asyncio
    async def test_rejects_window_longer_than_configured(self, service_for):
        service = service_for(
            [],
            settings=Settings(environment="test", analytics_max_window_days=31),
        )

        with pytest.raises(AnalyticsValidationError):
            await service.get_report(TODAY - timedelta(days=32), TODAY)

    @pytest.mark.asyncio
    async def test_repository_errors_propagate(self, settings):
        service = AnalyticsService(MagicMock(spec=AsyncSession), settings=settings)
        service.repository = AsyncMock()
        service.repository.fetch_orders.side_effect = AnalyticsRepositoryError(
            "Failed to fetch orders"
        )

        with pytest.raises(AnalyticsRepositoryError):
            await service.get_report(TODAY - timedelta(days=1), TODAY)


class TestDailyAndSnapshot:
    """Tests for the daily sales report and admin snapshot."""

    def test_day_bounds(self):
        start, end = day_bounds(date(2024, 2, 29))

        assert start == datetime(2024, 2, 29, tzinfo=UTC)
        assert end == datetime(2024, 3, 1, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_daily_sales_only_covers_requested_day(self, service_for, make_order, make_line, make_menu_item):
        pie = make_menu_item("Pie")
        orders = [
            make_order(TODAY + timedelta(hours=8), lines=[make_line(pie, 2)]),
            make_order(TODAY + timedelta(hours=23, minutes=59), lines=[make_line(pie, 1)]),
            make_order(TODAY + timedelta(days=1), lines=[make_line(pie, 5)]),
        ]

        rows = await service_for(orders).get_daily_sales(TODAY.date())

        assert len(rows) == 1
        assert rows[0].quantity_sold == 3

    @pytest.mark.asyncio
    async def test_admin_snapshot(self, service_for, make_order):
        orders = [
            make_order(TODAY + timedelta(hours=9), OrderStatus.COMPLETED, Decimal("12.00")),
            make_order(TODAY + timedelta(hours=10), OrderStatus.CANCELLED, Decimal("3.00")),
            make_order(TODAY - timedelta(hours=1), OrderStatus.COMPLETED, Decimal("99.00")),
        ]

        snapshot = await service_for(orders).get_admin_snapshot(
            now=TODAY + timedelta(hours=15)
        )

        assert snapshot.day == TODAY.date()
        assert snapshot.orders_today == 1
        assert snapshot.revenue_today == Decimal("12.00")
