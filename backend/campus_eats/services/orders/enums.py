"""Order status enum and the kitchen transition table.

This module defines the order lifecycle statuses and the single transition
table consulted by every status change in the kitchen workflow.
"""

from enum import Enum
from typing import Dict, Set


class OrderStatus(str, Enum):
    """Order lifecycle status with state machine transitions.

    Valid transitions:
    - PENDING -> IN_PREPARATION, CANCELLED
    - IN_PREPARATION -> READY
    - READY -> COMPLETED
    - COMPLETED -> (terminal state)
    - CANCELLED -> (terminal state)
    """

    PENDING = "pending"
    IN_PREPARATION = "in_preparation"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def from_string(cls, value: str) -> "OrderStatus":
        """Convert string to OrderStatus enum.

        Accepts the stored value ("in_preparation") as well as the display
        spelling used by the kitchen clients ("InPreparation"), case
        insensitively.

        Args:
            value: String representation of status

        Returns:
            OrderStatus enum value

        Raises:
            ValueError: If value is not a valid status
        """
        normalized = value.strip().lower().replace("_", "").replace(" ", "")
        for status in cls:
            if status.value.replace("_", "") == normalized:
                return status
        valid_values = ", ".join([s.value for s in cls])
        raise ValueError(
            f"Invalid order status: {value}. Valid values are: {valid_values}"
        )

    def is_terminal(self) -> bool:
        """Check if status is a terminal state.

        Returns:
            True if status is terminal (COMPLETED, CANCELLED)
        """
        return not ORDER_STATUS_TRANSITIONS[self]

    def is_active(self) -> bool:
        """Check if the order is still on the kitchen board."""
        return self in ACTIVE_ORDER_STATUSES


ORDER_STATUS_TRANSITIONS: Dict[OrderStatus, Set[OrderStatus]] = {
    OrderStatus.PENDING: {
        OrderStatus.IN_PREPARATION,
        OrderStatus.CANCELLED
    },
    OrderStatus.IN_PREPARATION: {
        OrderStatus.READY
    },
    OrderStatus.READY: {
        OrderStatus.COMPLETED
    },
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set()  # Terminal
}

ACTIVE_ORDER_STATUSES: frozenset = frozenset({
    OrderStatus.PENDING,
    OrderStatus.IN_PREPARATION,
    OrderStatus.READY,
})


def validate_order_status_transition(
    current: OrderStatus,
    new: OrderStatus
) -> bool:
    """Validate if order status transition is allowed.

    Args:
        current: Current order status
        new: Desired new status

    Returns:
        True if transition is valid
    """
    return new in ORDER_STATUS_TRANSITIONS.get(current, set())


def get_allowed_order_transitions(
    current: OrderStatus
) -> Set[OrderStatus]:
    """Get all allowed transitions from current order status.

    Args:
        current: Current order status

    Returns:
        Set of allowed next statuses
    """
    return ORDER_STATUS_TRANSITIONS.get(current, set()).copy()
