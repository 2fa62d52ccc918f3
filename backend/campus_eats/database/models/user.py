"""
Customer model referenced by orders.

Only the fields the kitchen and admin reports read are mapped here; account
management lives in the identity service.
"""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_eats.database.base import BaseModel

if TYPE_CHECKING:
    from campus_eats.database.models.order import Order


class User(BaseModel):
    """
    Customer placing orders.

    Attributes:
        id: Unique user identifier (UUID)
        name: Display name
        email: Contact email address
        orders: Orders placed by the user
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Display name",
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Contact email address",
    )

    orders: Mapped[list["Order"]] = relationship(
        "Order",
        back_populates="user",
        passive_deletes=True,
    )
