"""Daily sales report and admin order snapshot builders."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Sequence

from campus_eats.schemas.analytics import AdminOrderSnapshot, DailySalesRow, TopCustomer
from campus_eats.services.analytics.aggregator import ItemKey, item_key
from campus_eats.services.analytics.time_buckets import to_utc
from campus_eats.services.orders.enums import OrderStatus


def daily_sales_report(orders: Sequence[Any]) -> list[DailySalesRow]:
    """
    Quantity and revenue sold per menu item.

    Every order of the day is included regardless of status. Rows are sorted
    by quantity sold, highest first; items selling the same quantity keep
    the order in which they were first sold.
    """
    quantities: dict[ItemKey, int] = {}
    revenue: dict[ItemKey, Decimal] = {}

    for order in orders:
        for line in order.order_items:
            key = item_key(line)
            quantities[key] = quantities.get(key, 0) + line.quantity
            revenue[key] = revenue.get(key, Decimal("0")) + line.quantity * line.unit_price

    rows = [
        DailySalesRow(
            menu_item_id=menu_item_id,
            name=name,
            quantity_sold=quantity,
            revenue=revenue[(menu_item_id, name)],
        )
        for (menu_item_id, name), quantity in quantities.items()
    ]
    rows.sort(key=lambda row: row.quantity_sold, reverse=True)
    return rows


def build_admin_snapshot(
    now: datetime,
    orders_today: Sequence[Any],
    top_customers: Sequence[TopCustomer],
) -> AdminOrderSnapshot:
    """
    Build the admin dashboard order figures.

    Args:
        now: Current time; its UTC date names the snapshot day
        orders_today: Every order placed on that day
        top_customers: Customers ranked by completed spend

    Returns:
        Snapshot counting non-cancelled orders and completed revenue
    """
    return AdminOrderSnapshot(
        day=to_utc(now).date(),
        orders_today=sum(
            1 for order in orders_today if order.status != OrderStatus.CANCELLED
        ),
        revenue_today=sum(
            (
                order.total_amount
                for order in orders_today
                if order.status == OrderStatus.COMPLETED
            ),
            Decimal("0"),
        ),
        top_customers=list(top_customers),
    )
