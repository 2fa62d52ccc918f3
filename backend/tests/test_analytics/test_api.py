"""Tests for the analytics, daily sales and admin snapshot endpoints."""

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi import status

from campus_eats.api.deps import get_analytics_service
from campus_eats.schemas.analytics import AdminOrderSnapshot, DailySalesRow
from campus_eats.services.analytics.aggregator import build_report
from campus_eats.services.analytics.errors import (
    AnalyticsRepositoryError,
    AnalyticsValidationError,
)

START = datetime(2024, 5, 8, tzinfo=timezone.utc)
END = datetime(2024, 5, 16, tzinfo=timezone.utc)


@pytest.fixture
def analytics_service(test_client) -> AsyncMock:
    """Install a mocked analytics service."""
    service = AsyncMock()
    test_client.app.dependency_overrides[get_analytics_service] = lambda: service
    return service


class TestAnalyticsEndpoint:
    """Tests for GET /analytics."""

    def test_returns_report(self, test_client, analytics_service):
        analytics_service.get_report.return_value = build_report([], START, END, "day", 0, set())

        response = test_client.get(
            "/api/v1/kitchen/analytics",
            params={"start": "2024-05-08T00:00:00", "end": "2024-05-16T00:00:00"},
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["granularity"] == "day"
        assert len(body["time_series"]) == 8
        assert body["summary"]["change_vs_previous"] is None
        assert Decimal(body["performance"]["completion_rate"]) == Decimal("100")
        analytics_service.get_report.assert_awaited_once_with(START, END, "day")

    def test_passes_granularity(self, test_client, analytics_service):
        analytics_service.get_report.return_value = build_report([], START, END, "month", 0, set())

        response = test_client.get(
            "/api/v1/kitchen/analytics",
            params={
                "start": "2024-05-08T00:00:00Z",
                "end": "2024-05-16T00:00:00Z",
                "group_by": "Month",
            },
        )

        assert response.status_code == status.HTTP_200_OK
        assert analytics_service.get_report.await_args.args[2] == "Month"

    def test_inverted_period_is_rejected(self, test_client, analytics_service):
        response = test_client.get(
            "/api/v1/kitchen/analytics",
            params={"start": "2024-05-16T00:00:00Z", "end": "2024-05-08T00:00:00Z"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        analytics_service.get_report.assert_not_awaited()

    def test_missing_period_is_rejected(self, test_client, analytics_service):
        response = test_client.get("/api/v1/kitchen/analytics")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_validation_error_maps_to_422(self, test_client, analytics_service):
        analytics_service.get_report.side_effect = AnalyticsValidationError(
            "Invalid granularity: week", granularity="week"
        )

        response = test_client.get(
            "/api/v1/kitchen/analytics",
            params={
                "start": "2024-05-08T00:00:00Z",
                "end": "2024-05-16T00:00:00Z",
                "group_by": "week",
            },
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "granularity" in response.json()["detail"]

    def test_repository_error_maps_to_500(self, test_client, analytics_service):
        analytics_service.get_report.side_effect = AnalyticsRepositoryError("down")

        response = test_client.get(
            "/api/v1/kitchen/analytics",
            params={"start": "2024-05-08T00:00:00Z", "end": "2024-05-16T00:00:00Z"},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR


class TestReports:
    """Tests for the daily sales and admin snapshot endpoints."""

    def test_daily_sales(self, test_client, analytics_service):
        analytics_service.get_daily_sales.return_value = [
            DailySalesRow(
                menu_item_id=uuid4(),
                name="Bagel",
                quantity_sold=12,
                revenue=Decimal("30.00"),
            )
        ]

        response = test_client.get(
            "/api/v1/kitchen/reports/daily-sales", params={"day": "2024-05-15"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()[0]["quantity_sold"] == 12
        analytics_service.get_daily_sales.assert_awaited_once_with(date(2024, 5, 15))

    def test_daily_sales_defaults_to_today(self, test_client, analytics_service):
        analytics_service.get_daily_sales.return_value = []

        response = test_client.get("/api/v1/kitchen/reports/daily-sales")

        assert response.status_code == status.HTTP_200_OK
        requested = analytics_service.get_daily_sales.await_args.args[0]
        assert isinstance(requested, date)

    def test_admin_snapshot(self, test_client, analytics_service):
        analytics_service.get_admin_snapshot.return_value = AdminOrderSnapshot(
            day=date(2024, 5, 15),
            orders_today=7,
            revenue_today=Decimal("81.25"),
            top_customers=[],
        )

        response = test_client.get("/api/v1/kitchen/admin/snapshot")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["orders_today"] == 7
        assert body["day"] == "2024-05-15"

    def test_admin_snapshot_failure(self, test_client, analytics_service):
        analytics_service.get_admin_snapshot.side_effect = AnalyticsRepositoryError("down")

        response = test_client.get("/api/v1/kitchen/admin/snapshot")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
