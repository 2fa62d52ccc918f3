"""
Order and order line models for the kitchen workflow.

Orders keep the total amount captured at creation time and each line keeps the
unit price it was sold at. Deleting a customer or a menu item severs the
reference (SET NULL) while the historical order and its lines remain.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Numeric,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_eats.database.base import BaseModel
from campus_eats.services.orders.enums import OrderStatus

if TYPE_CHECKING:
    from campus_eats.database.models.menu_item import MenuItem
    from campus_eats.database.models.user import User


class Order(BaseModel):
    """
    Customer order tracked through the kitchen lifecycle.

    Attributes:
        id: Unique order identifier (UUID)
        user_id: Customer who placed the order, cleared if the customer is removed
        status: Current order status
        total_amount: Order total captured at creation
        order_date: When the order was placed
        order_items: Order lines with quantity and unit price snapshots
    """

    __tablename__ = "orders"

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Customer who placed the order",
    )

    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(
            OrderStatus,
            name="order_status",
            create_constraint=True,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
        comment="Current order status",
    )

    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        comment="Order total captured at creation",
    )

    order_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="When the order was placed",
    )

    user: Mapped[Optional["User"]] = relationship(
        "User",
        back_populates="orders",
    )

    order_items: Mapped[list["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_orders_total_amount_non_negative"),
        Index("ix_orders_user_id_order_date", "user_id", "order_date"),
    )

    @property
    def items_count(self) -> int:
        """Total quantity across all order lines."""
        return sum(item.quantity for item in self.order_items)


class OrderItem(BaseModel):
    """
    Single order line with historical price snapshot.

    Attributes:
        id: Unique order line identifier (UUID)
        order_id: Owning order
        menu_item_id: Ordered menu item, cleared if the item is deleted
        quantity: Number of units ordered
        unit_price: Price per unit at order time
    """

    __tablename__ = "order_items"

    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning order",
    )

    menu_item_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("menu_items.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Ordered menu item",
    )

    quantity: Mapped[int] = mapped_column(
        nullable=False,
        comment="Number of units ordered",
    )

    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        comment="Price per unit at order time",
    )

    order: Mapped["Order"] = relationship(
        "Order",
        back_populates="order_items",
    )

    menu_item: Mapped[Optional["MenuItem"]] = relationship("MenuItem")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_order_items_unit_price_non_negative"),
    )

    @property
    def line_total(self) -> Decimal:
        """Quantity multiplied by the unit price snapshot."""
        return self.quantity * self.unit_price
