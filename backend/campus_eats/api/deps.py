"""
FastAPI dependencies for the kitchen API.

This module provides the database session dependency and the service
factories used by the kitchen endpoints. Tests replace the service factories
through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_eats.core.config import get_settings
from campus_eats.database.connection import get_db
from campus_eats.services.analytics.service import AnalyticsService
from campus_eats.services.orders.service import KitchenOrderService

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


async def get_kitchen_order_service(db: DatabaseSession) -> KitchenOrderService:
    """Kitchen order service bound to the request session."""
    return KitchenOrderService(db)


async def get_analytics_service(db: DatabaseSession) -> AnalyticsService:
    """Analytics service bound to the request session."""
    return AnalyticsService(db, get_settings())


KitchenOrders = Annotated[KitchenOrderService, Depends(get_kitchen_order_service)]
Analytics = Annotated[AnalyticsService, Depends(get_analytics_service)]
