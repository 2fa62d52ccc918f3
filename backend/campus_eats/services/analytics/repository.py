"""
Analytics data access repository.

Read-only queries backing the kitchen analytics report, the daily sales report
and the admin order snapshot. Orders are returned with their lines and menu
items loaded so aggregation never triggers lazy loads.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Collection, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_eats.core.logging import get_logger
from campus_eats.database.models.order import Order, OrderItem
from campus_eats.database.models.user import User
from campus_eats.schemas.analytics import TopCustomer
from campus_eats.services.analytics.errors import AnalyticsRepositoryError
from campus_eats.services.orders.enums import OrderStatus

logger = get_logger(__name__)


class AnalyticsRepository:
    """Repository for analytics queries."""

    def __init__(self, session: AsyncSession):
        """
        Initialize analytics repository.

        Args:
            session: Async database session
        """
        self.session = session

    async def fetch_orders(self, start: datetime, end: datetime) -> Sequence[Order]:
        """
        Get orders placed in ``[start, end)`` with lines and menu items.

        Orders are sorted by ``(order_date, id)``; aggregation tie-breaks rely
        on this order.

        Raises:
            AnalyticsRepositoryError: If query fails
        """
        try:
            stmt = (
                select(Order)
                .options(
                    selectinload(Order.order_items).selectinload(OrderItem.menu_item)
                )
                .where(Order.order_date >= start, Order.order_date < end)
                .order_by(Order.order_date.asc(), Order.id.asc())
            )

            result = await self.session.execute(stmt)
            orders = result.scalars().all()

            logger.debug(
                "Orders fetched for analytics",
                start=start.isoformat(),
                end=end.isoformat(),
                count=len(orders),
            )

            return orders

        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch orders",
                start=start.isoformat(),
                end=end.isoformat(),
                error=str(e),
            )
            raise AnalyticsRepositoryError(
                "Failed to fetch orders",
                start=start.isoformat(),
                end=end.isoformat(),
                error=str(e),
            ) from e

    async def fetch_order_count(
        self,
        start: datetime,
        end: datetime,
        exclude_cancelled: bool = False,
    ) -> int:
        """
        Count orders placed in ``[start, end)``.

        Args:
            start: Period start (inclusive)
            end: Period end (exclusive)
            exclude_cancelled: Leave cancelled orders out of the count

        Raises:
            AnalyticsRepositoryError: If query fails
        """
        try:
            stmt = select(func.count(Order.id)).where(
                Order.order_date >= start,
                Order.order_date < end,
            )
            if exclude_cancelled:
                stmt = stmt.where(Order.status != OrderStatus.CANCELLED)

            result = await self.session.execute(stmt)
            return result.scalar_one()

        except SQLAlchemyError as e:
            logger.error("Failed to count orders", error=str(e))
            raise AnalyticsRepositoryError(
                "Failed to count orders",
                start=start.isoformat(),
                end=end.isoformat(),
                error=str(e),
            ) from e

    async def fetch_customers_with_prior_orders(
        self,
        customer_ids: Collection[uuid.UUID],
        before: datetime,
    ) -> set[uuid.UUID]:
        """
        Get the subset of ``customer_ids`` with an order strictly before ``before``.

        Raises:
            AnalyticsRepositoryError: If query fails
        """
        if not customer_ids:
            return set()

        try:
            stmt = (
                select(Order.user_id)
                .where(
                    Order.user_id.in_(list(customer_ids)),
                    Order.order_date < before,
                )
                .distinct()
            )

            result = await self.session.execute(stmt)
            return set(result.scalars().all())

        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch returning customers",
                customers=len(customer_ids),
                error=str(e),
            )
            raise AnalyticsRepositoryError(
                "Failed to fetch returning customers",
                error=str(e),
            ) from e

    async def fetch_top_customers(self, limit: int = 10) -> list[TopCustomer]:
        """
        Get customers ranked by completed order spend.

        Args:
            limit: Maximum number of customers

        Raises:
            AnalyticsRepositoryError: If query fails
        """
        try:
            total_spent = func.sum(Order.total_amount).label("total_spent")
            stmt = (
                select(
                    User.id,
                    User.name,
                    User.email,
                    func.count(Order.id).label("total_orders"),
                    total_spent,
                )
                .join(Order, Order.user_id == User.id)
                .where(Order.status == OrderStatus.COMPLETED)
                .group_by(User.id, User.name, User.email)
                .order_by(total_spent.desc(), User.id.asc())
                .limit(limit)
            )

            result = await self.session.execute(stmt)

            return [
                TopCustomer(
                    user_id=row.id,
                    name=row.name,
                    email=row.email,
                    total_orders=row.total_orders,
                    total_spent=row.total_spent or Decimal("0"),
                )
                for row in result.all()
            ]

        except SQLAlchemyError as e:
            logger.error("Failed to fetch top customers", error=str(e))
            raise AnalyticsRepositoryError(
                "Failed to fetch top customers",
                error=str(e),
            ) from e
