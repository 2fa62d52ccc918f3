"""
Kitchen order service orchestrating status changes and notifications.

This module implements the KitchenOrderService class used by the kitchen
endpoints. It runs every status change through the state machine, commits it,
publishes a status-changed event and lists the active kitchen board.
"""

import uuid
from typing import Any, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_eats.core.logging import get_logger
from campus_eats.database.models.order import Order
from campus_eats.services.orders.enums import OrderStatus
from campus_eats.services.orders.events import (
    LoggingStatusChangePublisher,
    OrderStatusChangedEvent,
    StatusChangePublisher,
)
from campus_eats.services.orders.repository import (
    OrderNotFoundError,
    OrderRepository,
    OrderRepositoryError,
)
from campus_eats.services.orders.state_machine import (
    OrderStateMachine,
    StateTransitionError,
)

logger = get_logger(__name__)


class OrderServiceError(Exception):
    """Base exception for order service errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context


class OrderProcessingError(OrderServiceError):
    """Raised when order processing fails."""

    pass


class KitchenOrderService:
    """
    Kitchen order service.

    Attributes:
        repository: Order repository for data access
        state_machine: State machine for order lifecycle management
        publisher: Receives an event after every successful transition
    """

    def __init__(
        self,
        session: AsyncSession,
        publisher: Optional[StatusChangePublisher] = None,
    ):
        """
        Initialize kitchen order service.

        Args:
            session: Async database session
            publisher: Optional status change publisher, logs events if omitted
        """
        self.session = session
        self.repository = OrderRepository(session)
        self.state_machine = OrderStateMachine(self.repository)
        self.publisher = publisher or LoggingStatusChangePublisher()

    async def update_order_status(
        self,
        order_id: uuid.UUID,
        new_status: OrderStatus,
    ) -> Order:
        """
        Update order status with state machine validation.

        Args:
            order_id: Order identifier
            new_status: New order status

        Returns:
            Updated order with its lines

        Raises:
            OrderNotFoundError: If order not found
            StateTransitionError: If the transition is invalid or lost a race
            OrderProcessingError: If the data store fails or the commit fails
        """
        logger.info(
            "Updating order status",
            order_id=str(order_id),
            new_status=new_status.value,
        )

        try:
            order, old_status = await self.state_machine.attempt_transition(
                order_id, new_status
            )

        except OrderNotFoundError:
            raise

        except StateTransitionError as e:
            logger.warning(
                "Invalid state transition",
                order_id=str(order_id),
                current_status=e.current_state.value,
                target_status=e.target_state.value,
                conflict=e.context.get("conflict", False),
            )
            raise

        except OrderRepositoryError as e:
            logger.error(
                "Failed to update order status",
                order_id=str(order_id),
                error=str(e),
            )
            raise OrderProcessingError(
                "Failed to update order status",
                order_id=str(order_id),
                error=str(e),
            ) from e

        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to commit order status",
                order_id=str(order_id),
                error=str(e),
            )
            raise OrderProcessingError(
                "Failed to commit order status",
                order_id=str(order_id),
                error=str(e),
            ) from e

        # Events describe committed state only
        await self._publish_status_change(order, old_status)

        return order

    async def prepare_order(self, order_id: uuid.UUID) -> Order:
        """Start preparing a pending order."""
        return await self.update_order_status(order_id, OrderStatus.IN_PREPARATION)

    async def mark_order_ready(self, order_id: uuid.UUID) -> Order:
        """Mark an order in preparation as ready."""
        return await self.update_order_status(order_id, OrderStatus.READY)

    async def complete_order(self, order_id: uuid.UUID) -> Order:
        """Complete a ready order."""
        return await self.update_order_status(order_id, OrderStatus.COMPLETED)

    async def cancel_order(self, order_id: uuid.UUID) -> Order:
        """Cancel a pending order."""
        return await self.update_order_status(order_id, OrderStatus.CANCELLED)

    async def list_active_orders(self) -> Sequence[Order]:
        """
        Get the kitchen board.

        Raises:
            OrderProcessingError: If the data store fails
        """
        try:
            return await self.repository.list_active_orders()
        except OrderRepositoryError as e:
            raise OrderProcessingError(
                "Failed to list active orders",
                error=str(e),
            ) from e

    async def _publish_status_change(
        self,
        order: Order,
        old_status: OrderStatus,
    ) -> None:
        """
        Publish the status change without failing the transition.

        Args:
            order: Order after the transition
            old_status: Status before the transition
        """
        event = OrderStatusChangedEvent(
            order_id=order.id,
            user_id=order.user_id,
            old_status=old_status,
            new_status=order.status,
        )
        try:
            await self.publisher.publish(event)
        except Exception as e:
            # The status is already stored; a lost push must not undo it
            logger.error(
                "Failed to publish status change",
                order_id=str(order.id),
                error=str(e),
                error_type=type(e).__name__,
            )
