"""
Menu item model referenced by order lines.

Menu CRUD is owned by the menu service; order lines keep their own price
snapshot so reports never read the current menu price.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from campus_eats.database.base import BaseModel


class MenuItem(BaseModel):
    """
    Item offered on the campus menu.

    Attributes:
        id: Unique menu item identifier (UUID)
        name: Display name
        category: Category name, absent for uncategorised items
        price: Current list price
    """

    __tablename__ = "menu_items"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Display name",
    )

    category: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
        comment="Category name",
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        comment="Current list price",
    )
