"""
Pytest configuration and shared test fixtures.

This module provides the FastAPI test client and factories that build
transient (never persisted) orders, order lines and menu items for the
order lifecycle and analytics tests.
"""

import os
from datetime import datetime
from decimal import Decimal
from typing import Callable, Generator, Iterable, Optional
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("APP_ENVIRONMENT", "test")

from campus_eats.database.models import MenuItem, Order, OrderItem  # noqa: E402
from campus_eats.services.orders.enums import OrderStatus  # noqa: E402


@pytest.fixture
def make_menu_item() -> Callable[..., MenuItem]:
    """
    Factory for menu items.

    Example:
        def test_item(make_menu_item):
            burger = make_menu_item("Burger", category="Mains")
    """

    def _make(
        name: str,
        category: Optional[str] = "Mains",
        price: Decimal = Decimal("10.00"),
    ) -> MenuItem:
        return MenuItem(id=uuid4(), name=name, category=category, price=price)

    return _make


@pytest.fixture
def make_line() -> Callable[..., OrderItem]:
    """
    Factory for order lines.

    Passing ``menu_item=None`` builds a severed line whose menu item was
    deleted after the order was placed.
    """

    def _make(
        menu_item: Optional[MenuItem],
        quantity: int = 1,
        unit_price: Optional[Decimal] = None,
    ) -> OrderItem:
        if unit_price is None:
            unit_price = menu_item.price if menu_item is not None else Decimal("5.00")
        return OrderItem(
            id=uuid4(),
            menu_item_id=menu_item.id if menu_item is not None else None,
            menu_item=menu_item,
            quantity=quantity,
            unit_price=unit_price,
        )

    return _make


@pytest.fixture
def make_order() -> Callable[..., Order]:
    """
    Factory for orders.

    The total defaults to the sum of the line totals, matching how orders are
    priced at creation.
    """

    def _make(
        order_date: datetime,
        status: OrderStatus = OrderStatus.COMPLETED,
        total_amount: Optional[Decimal] = None,
        user_id: Optional[UUID] = None,
        lines: Iterable[OrderItem] = (),
    ) -> Order:
        lines = list(lines)
        if total_amount is None:
            total_amount = sum(
                (line.quantity * line.unit_price for line in lines), Decimal("0")
            )
        return Order(
            id=uuid4(),
            user_id=user_id,
            status=status,
            total_amount=total_amount,
            order_date=order_date,
            order_items=lines,
        )

    return _make


@pytest.fixture(scope="function")
def test_client() -> Generator[TestClient, None, None]:
    """
    Create a synchronous test client for the FastAPI application.

    Dependency overrides installed by a test are removed afterwards.

    Yields:
        TestClient: Synchronous test client for FastAPI app
    """
    from campus_eats.main import app

    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
