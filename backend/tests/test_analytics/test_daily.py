"""Tests for the daily sales report and the admin order snapshot."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from campus_eats.schemas.analytics import TopCustomer
from campus_eats.services.analytics.daily import build_admin_snapshot, daily_sales_report
from campus_eats.services.orders.enums import OrderStatus

NOON = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def menu(make_menu_item):
    return {
        "wrap": make_menu_item("Wrap", price=Decimal("6.50")),
        "tea": make_menu_item("Tea", category="Drinks", price=Decimal("1.80")),
        "soup": make_menu_item("Soup", price=Decimal("4.00")),
    }


class TestDailySalesReport:
    """Tests for per-item daily sales."""

    def test_rows_sorted_by_quantity(self, make_order, make_line, menu):
        orders = [
            make_order(NOON, lines=[make_line(menu["wrap"], 1), make_line(menu["tea"], 2)]),
            make_order(NOON, lines=[make_line(menu["tea"], 3), make_line(menu["soup"], 2)]),
        ]

        rows = daily_sales_report(orders)

        assert [(r.name, r.quantity_sold, r.revenue) for r in rows] == [
            ("Tea", 5, Decimal("9.00")),
            ("Soup", 2, Decimal("8.00")),
            ("Wrap", 1, Decimal("6.50")),
        ]
        assert rows[0].menu_item_id == menu["tea"].id

    def test_equal_quantities_keep_first_sold(self, make_order, make_line, menu):
        orders = [
            make_order(NOON, lines=[make_line(menu["soup"], 2)]),
            make_order(NOON, lines=[make_line(menu["wrap"], 2)]),
        ]

        assert [r.name for r in daily_sales_report(orders)] == ["Soup", "Wrap"]

    def test_uses_line_price_snapshot(self, make_order, make_line, menu):
        orders = [make_order(NOON, lines=[make_line(menu["wrap"], 2, Decimal("5.00"))])]

        assert daily_sales_report(orders)[0].revenue == Decimal("10.00")

    def test_severed_lines_are_reported_together(self, make_order, make_line):
        orders = [
            make_order(NOON, lines=[make_line(None, 1, Decimal("3.00"))]),
            make_order(NOON, lines=[make_line(None, 2, Decimal("3.00"))]),
        ]

        rows = daily_sales_report(orders)

        assert len(rows) == 1
        assert rows[0].menu_item_id is None
        assert rows[0].quantity_sold == 3

    def test_no_orders(self):
        assert daily_sales_report([]) == []


class TestAdminSnapshot:
    """Tests for the admin order snapshot."""

    def test_counts_and_revenue_rules(self, make_order):
        orders = [
            make_order(NOON, OrderStatus.COMPLETED, Decimal("10.00")),
            make_order(NOON, OrderStatus.COMPLETED, Decimal("5.50")),
            make_order(NOON, OrderStatus.PENDING, Decimal("20.00")),
            make_order(NOON, OrderStatus.CANCELLED, Decimal("40.00")),
        ]

        snapshot = build_admin_snapshot(NOON, orders, [])

        assert snapshot.day == date(2024, 5, 15)
        assert snapshot.orders_today == 3
        assert snapshot.revenue_today == Decimal("15.50")

    def test_day_is_utc_date(self):
        late_evening = datetime(2024, 5, 15, 22, 0, tzinfo=timezone(timedelta(hours=-4)))

        assert build_admin_snapshot(late_evening, [], []).day == date(2024, 5, 16)

    def test_top_customers_are_passed_through(self):
        customer = TopCustomer(
            user_id=uuid4(),
            name="Ada",
            email="ada@campus.edu",
            total_orders=4,
            total_spent=Decimal("52.00"),
        )

        snapshot = build_admin_snapshot(NOON, [], [customer])

        assert snapshot.top_customers == [customer]
        assert snapshot.orders_today == 0
        assert snapshot.revenue_today == 0
