"""Order state machine implementation with transition validation.

This module implements the OrderStateMachine class. Every kitchen action
(prepare, ready, complete, cancel and the generic status update) goes through
``attempt_transition``, which consults the single transition table in
``campus_eats.services.orders.enums`` and persists the change with a
conditional update.
"""

from typing import Any, Set
from uuid import UUID

from campus_eats.core.logging import get_logger
from campus_eats.database.models.order import Order
from campus_eats.services.orders.enums import (
    OrderStatus,
    get_allowed_order_transitions,
    validate_order_status_transition,
)
from campus_eats.services.orders.repository import (
    OrderNotFoundError,
    OrderRepository,
)

logger = get_logger(__name__)


class StateTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        message: str,
        current_state: OrderStatus,
        target_state: OrderStatus,
        **context: Any
    ):
        super().__init__(message)
        self.current_state = current_state
        self.target_state = target_state
        self.context = context


class StateTransitionConflictError(StateTransitionError):
    """Raised when the order changed status between read and update."""

    pass


class OrderStateMachine:
    """State machine for managing order lifecycle transitions.

    Reads the current status, validates the requested transition against the
    transition table and stores the new status only if the order is still in
    the status that was read.
    """

    def __init__(self, repository: OrderRepository):
        """Initialize state machine with the order repository.

        Args:
            repository: Order data access used for reads and conditional updates
        """
        self.repository = repository

    def validate_transition(
        self,
        order_id: UUID,
        current_status: OrderStatus,
        target_status: OrderStatus,
    ) -> bool:
        """Validate if transition to target status is allowed.

        Args:
            order_id: Order being transitioned, for error context
            current_status: Status the order is in
            target_status: Desired target status

        Returns:
            True if transition is valid

        Raises:
            StateTransitionError: If transition is invalid
        """
        logger.debug(
            "Validating state transition",
            order_id=str(order_id),
            current_status=current_status.value,
            target_status=target_status.value,
        )

        if not validate_order_status_transition(current_status, target_status):
            allowed = get_allowed_order_transitions(current_status)
            raise StateTransitionError(
                f"Invalid transition from {current_status.value} to "
                f"{target_status.value}",
                current_state=current_status,
                target_state=target_status,
                order_id=str(order_id),
                allowed_transitions=sorted(s.value for s in allowed),
            )

        return True

    async def attempt_transition(
        self,
        order_id: UUID,
        requested_status: OrderStatus,
    ) -> tuple[Order, OrderStatus]:
        """Validate and apply a status transition.

        Args:
            order_id: Order to transition
            requested_status: Target status

        Returns:
            Tuple of (updated order with lines loaded, previous status)

        Raises:
            OrderNotFoundError: If the order does not exist
            StateTransitionError: If the transition is not in the table
            StateTransitionConflictError: If another transition won the race
        """
        order = await self.repository.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(
                "Order not found",
                order_id=str(order_id),
            )

        current_status = order.status
        self.validate_transition(order_id, current_status, requested_status)

        updated = await self.repository.set_order_status(
            order_id,
            requested_status,
            expected_current_status=current_status,
        )
        if not updated:
            raise StateTransitionConflictError(
                f"Order is no longer {current_status.value}; "
                f"transition to {requested_status.value} rejected",
                current_state=current_status,
                target_state=requested_status,
                order_id=str(order_id),
                conflict=True,
            )

        order = await self.repository.get_order(order_id, refresh=True)
        if order is None:
            raise OrderNotFoundError(
                "Order not found",
                order_id=str(order_id),
            )

        logger.info(
            "State transition applied successfully",
            order_id=str(order_id),
            transition=f"{current_status.value}->{requested_status.value}",
        )

        return order, current_status

    async def prepare(self, order_id: UUID) -> tuple[Order, OrderStatus]:
        """Move an order into preparation."""
        return await self.attempt_transition(order_id, OrderStatus.IN_PREPARATION)

    async def mark_ready(self, order_id: UUID) -> tuple[Order, OrderStatus]:
        """Mark an order ready for pickup."""
        return await self.attempt_transition(order_id, OrderStatus.READY)

    async def complete(self, order_id: UUID) -> tuple[Order, OrderStatus]:
        """Complete a picked-up order."""
        return await self.attempt_transition(order_id, OrderStatus.COMPLETED)

    async def cancel(self, order_id: UUID) -> tuple[Order, OrderStatus]:
        """Cancel an order that has not started preparation."""
        return await self.attempt_transition(order_id, OrderStatus.CANCELLED)

    def get_allowed_transitions(self, order: Any) -> Set[OrderStatus]:
        """Get allowed transitions from current order status.

        Args:
            order: Order instance

        Returns:
            Set of allowed target statuses
        """
        return get_allowed_order_transitions(order.status)


def get_order_state_machine(repository: OrderRepository) -> OrderStateMachine:
    """Factory function to create OrderStateMachine instance."""
    return OrderStateMachine(repository)
