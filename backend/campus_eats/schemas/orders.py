"""
Kitchen order Pydantic schemas for API request/response validation.

This module defines the status change request accepted by the kitchen
endpoints and the order response returned after a transition or when listing
the kitchen board.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from campus_eats.services.orders.enums import OrderStatus


class OrderStatusUpdateRequest(BaseModel):
    """Request schema for changing an order's status."""

    model_config = ConfigDict(validate_assignment=True)

    status: OrderStatus = Field(
        ...,
        description="Target status, e.g. in_preparation or InPreparation",
    )

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v: Any) -> Any:
        """Accept both stored and display spellings of a status."""
        if isinstance(v, str):
            return OrderStatus.from_string(v)
        return v


class KitchenOrderItemResponse(BaseModel):
    """Order line as shown on the kitchen board."""

    model_config = ConfigDict(from_attributes=True)

    menu_item_id: Optional[UUID] = None
    name: str
    quantity: int
    unit_price: Decimal


class KitchenOrderResponse(BaseModel):
    """Order response for kitchen endpoints."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: Optional[UUID] = None
    status: OrderStatus
    total_amount: Decimal
    order_date: datetime
    items: list[KitchenOrderItemResponse] = Field(default_factory=list)

    @classmethod
    def from_order(cls, order: Any) -> "KitchenOrderResponse":
        """Build the response from an order with its lines loaded."""
        return cls(
            id=order.id,
            user_id=order.user_id,
            status=order.status,
            total_amount=order.total_amount,
            order_date=order.order_date,
            items=[
                KitchenOrderItemResponse(
                    menu_item_id=line.menu_item_id,
                    name=line.menu_item.name if line.menu_item else "Unknown",
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in order.order_items
            ],
        )
