"""
Order status change events.

After a successful transition the kitchen service hands an
``OrderStatusChangedEvent`` to a publisher. Delivery to connected clients
(the customer's channel and the kitchen board) belongs to the push service;
this module only defines the event and the publisher seam.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from campus_eats.core.logging import get_logger
from campus_eats.services.orders.enums import OrderStatus

logger = get_logger(__name__)


class OrderStatusChangedEvent(BaseModel):
    """Status change of a single order."""

    model_config = ConfigDict(frozen=True)

    order_id: UUID
    user_id: Optional[UUID] = None
    old_status: OrderStatus
    new_status: OrderStatus
    changed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def audiences(self) -> list[str]:
        """Channel groups the event is addressed to."""
        groups = ["kitchen"]
        if self.user_id is not None:
            groups.insert(0, f"user:{self.user_id}")
        return groups


class StatusChangePublisher:
    """Publishes status change events to the push channel."""

    async def publish(self, event: OrderStatusChangedEvent) -> None:
        """Deliver one event. Subclasses must override this."""
        raise NotImplementedError


class LoggingStatusChangePublisher(StatusChangePublisher):
    """Publisher used when no push channel is configured."""

    async def publish(self, event: OrderStatusChangedEvent) -> None:
        logger.info(
            "Order status changed",
            order_id=str(event.order_id),
            old_status=event.old_status.value,
            new_status=event.new_status.value,
            audiences=event.audiences,
        )
