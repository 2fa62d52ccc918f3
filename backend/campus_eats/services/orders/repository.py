"""
Order data access repository for the kitchen workflow.

This module implements the OrderRepository class providing async methods for
loading orders with their lines, listing the active kitchen board and applying
status changes as a single conditional update so that concurrent transitions
on the same order cannot overwrite each other.
"""

import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from campus_eats.core.logging import get_logger
from campus_eats.database.models.order import Order, OrderItem
from campus_eats.services.orders.enums import ACTIVE_ORDER_STATUSES, OrderStatus

logger = get_logger(__name__)


class OrderRepositoryError(Exception):
    """Base exception for order repository errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class OrderNotFoundError(OrderRepositoryError):
    """Raised when order is not found."""

    pass


class OrderUpdateError(OrderRepositoryError):
    """Raised when order update fails."""

    pass


class OrderRepository:
    """
    Repository for order data access operations.

    Provides async methods to read orders with their lines and menu items,
    list the active kitchen board and conditionally update order status.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize order repository.

        Args:
            session: Async database session
        """
        self.session = session

    @staticmethod
    def _with_lines(stmt):
        return stmt.options(
            selectinload(Order.order_items).selectinload(OrderItem.menu_item)
        )

    async def get_order(
        self,
        order_id: uuid.UUID,
        refresh: bool = False,
    ) -> Optional[Order]:
        """
        Get order by ID with its lines and their menu items.

        Args:
            order_id: Order identifier
            refresh: Overwrite any copy already held in the session

        Returns:
            Order if found, None otherwise

        Raises:
            OrderRepositoryError: If query fails
        """
        try:
            logger.debug("Fetching order by ID", order_id=str(order_id))

            stmt = self._with_lines(select(Order).where(Order.id == order_id))
            if refresh:
                stmt = stmt.execution_options(populate_existing=True)

            result = await self.session.execute(stmt)
            order = result.scalar_one_or_none()

            if order:
                logger.debug("Order found", order_id=str(order_id))
            else:
                logger.debug("Order not found", order_id=str(order_id))

            return order

        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch order",
                order_id=str(order_id),
                error=str(e),
            )
            raise OrderRepositoryError(
                "Failed to fetch order",
                order_id=str(order_id),
                error=str(e),
            ) from e

    async def set_order_status(
        self,
        order_id: uuid.UUID,
        new_status: OrderStatus,
        expected_current_status: OrderStatus,
    ) -> bool:
        """
        Set order status only if the stored status still matches.

        Issues ``UPDATE orders SET status = :new WHERE id = :id AND
        status = :expected`` so the read-modify-write of a transition is
        serialized by the database.

        Args:
            order_id: Order identifier
            new_status: Status to store
            expected_current_status: Status the caller read before deciding

        Returns:
            True if the row was updated, False if the precondition no longer
            held (or the order vanished)

        Raises:
            OrderUpdateError: If update fails
        """
        try:
            logger.info(
                "Updating order status",
                order_id=str(order_id),
                expected_status=expected_current_status.value,
                new_status=new_status.value,
            )

            stmt = (
                update(Order)
                .where(
                    Order.id == order_id,
                    Order.status == expected_current_status,
                )
                .values(status=new_status)
                .execution_options(synchronize_session=False)
            )

            result = await self.session.execute(stmt)
            updated = result.rowcount == 1

            if updated:
                await self.session.flush()
                logger.info(
                    "Order status updated",
                    order_id=str(order_id),
                    old_status=expected_current_status.value,
                    new_status=new_status.value,
                )
            else:
                logger.warning(
                    "Order status precondition failed",
                    order_id=str(order_id),
                    expected_status=expected_current_status.value,
                    new_status=new_status.value,
                )

            return updated

        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to update order status",
                order_id=str(order_id),
                error=str(e),
            )
            raise OrderUpdateError(
                "Failed to update order status",
                order_id=str(order_id),
                error=str(e),
            ) from e

    async def list_active_orders(self) -> Sequence[Order]:
        """
        Get orders still on the kitchen board, oldest first.

        Returns:
            Pending, in-preparation and ready orders with their lines

        Raises:
            OrderRepositoryError: If query fails
        """
        try:
            stmt = self._with_lines(
                select(Order)
                .where(Order.status.in_(list(ACTIVE_ORDER_STATUSES)))
                .order_by(Order.order_date.asc(), Order.id.asc())
            )

            result = await self.session.execute(stmt)
            orders = result.scalars().all()

            logger.debug("Active orders fetched", count=len(orders))

            return orders

        except SQLAlchemyError as e:
            logger.error("Failed to fetch active orders", error=str(e))
            raise OrderRepositoryError(
                "Failed to fetch active orders",
                error=str(e),
            ) from e
