"""
Kitchen API endpoints for CampusEats.

This module implements the FastAPI router used by kitchen staff and
administrators: order status transitions, the active order board, the kitchen
analytics report, the daily sales report and the admin order snapshot.
Domain errors are mapped to HTTP status codes here and nowhere else.
"""

from datetime import date, datetime, timezone
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from campus_eats.api.deps import Analytics, KitchenOrders
from campus_eats.core.logging import get_logger
from campus_eats.schemas.analytics import (
    AdminOrderSnapshot,
    AnalyticsReport,
    AnalyticsRequest,
    DailySalesRow,
)
from campus_eats.schemas.orders import KitchenOrderResponse, OrderStatusUpdateRequest
from campus_eats.services.analytics.errors import (
    AnalyticsRepositoryError,
    AnalyticsValidationError,
)
from campus_eats.services.orders.enums import OrderStatus
from campus_eats.services.orders.repository import OrderNotFoundError
from campus_eats.services.orders.service import KitchenOrderService, OrderServiceError
from campus_eats.services.orders.state_machine import (
    StateTransitionConflictError,
    StateTransitionError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/kitchen", tags=["kitchen"])


async def _transition(
    service: KitchenOrderService,
    order_id: UUID,
    new_status: OrderStatus,
) -> KitchenOrderResponse:
    """
    Apply a status transition and map domain errors to HTTP errors.

    Raises:
        HTTPException: 404 if order not found, 400 if the transition is not
            allowed, 409 if another request changed the order first, 500 if
            the update fails
    """
    try:
        order = await service.update_order_status(order_id, new_status)
        return KitchenOrderResponse.from_order(order)

    except OrderNotFoundError as e:
        logger.warning("Order not found for status update", order_id=str(order_id))
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found",
        ) from e

    except StateTransitionConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e

    except StateTransitionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    except OrderServiceError as e:
        logger.error(
            "Failed to update order status",
            order_id=str(order_id),
            error=str(e),
            context=e.context,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update order status",
        ) from e


@router.patch(
    "/orders/{order_id}/status",
    response_model=KitchenOrderResponse,
    summary="Update order status",
    description="Move an order to another status allowed by the transition table",
)
async def update_order_status(
    order_id: UUID,
    request: OrderStatusUpdateRequest,
    service: KitchenOrders,
) -> KitchenOrderResponse:
    return await _transition(service, order_id, request.status)


@router.post(
    "/orders/{order_id}/prepare",
    response_model=KitchenOrderResponse,
    summary="Start preparing an order",
)
async def prepare_order(order_id: UUID, service: KitchenOrders) -> KitchenOrderResponse:
    return await _transition(service, order_id, OrderStatus.IN_PREPARATION)


@router.post(
    "/orders/{order_id}/ready",
    response_model=KitchenOrderResponse,
    summary="Mark an order ready for pickup",
)
async def mark_order_ready(order_id: UUID, service: KitchenOrders) -> KitchenOrderResponse:
    return await _transition(service, order_id, OrderStatus.READY)


@router.post(
    "/orders/{order_id}/complete",
    response_model=KitchenOrderResponse,
    summary="Complete an order",
)
async def complete_order(order_id: UUID, service: KitchenOrders) -> KitchenOrderResponse:
    return await _transition(service, order_id, OrderStatus.COMPLETED)


@router.get(
    "/orders",
    response_model=list[KitchenOrderResponse],
    summary="List active orders",
    description="Pending, in-preparation and ready orders, oldest first",
)
async def list_active_orders(service: KitchenOrders) -> list[KitchenOrderResponse]:
    try:
        orders = await service.list_active_orders()
        return [KitchenOrderResponse.from_order(order) for order in orders]

    except OrderServiceError as e:
        logger.error("Failed to list active orders", error=str(e), context=e.context)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list active orders",
        ) from e


@router.get(
    "/analytics",
    response_model=AnalyticsReport,
    summary="Kitchen analytics report",
    description="Time series, performance, item, revenue and customer insights for [start, end)",
)
async def get_analytics(
    query: Annotated[AnalyticsRequest, Query()],
    service: Analytics,
) -> AnalyticsReport:
    """
    Build the analytics report for the requested period.

    Raises:
        HTTPException: 422 if the period or granularity is invalid, 500 if a
            query fails
    """
    logger.info(
        "Analytics report requested",
        start=query.start.isoformat(),
        end=query.end.isoformat(),
        group_by=query.group_by,
    )

    try:
        return await service.get_report(query.start, query.end, query.group_by)

    except AnalyticsValidationError as e:
        logger.warning("Invalid analytics request", error=str(e), context=e.context)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e

    except AnalyticsRepositoryError as e:
        logger.error("Failed to build analytics report", error=str(e), context=e.context)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build analytics report",
        ) from e


@router.get(
    "/reports/daily-sales",
    response_model=list[DailySalesRow],
    summary="Daily sales report",
)
async def get_daily_sales(
    service: Analytics,
    day: Optional[date] = Query(None, description="UTC day, defaults to today"),
) -> list[DailySalesRow]:
    day = day or datetime.now(timezone.utc).date()

    try:
        return await service.get_daily_sales(day)

    except AnalyticsRepositoryError as e:
        logger.error("Failed to build daily sales report", error=str(e), context=e.context)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build daily sales report",
        ) from e


@router.get(
    "/admin/snapshot",
    response_model=AdminOrderSnapshot,
    summary="Admin order snapshot",
    description="Today's non-cancelled orders, completed revenue and top customers",
)
async def get_admin_snapshot(service: Analytics) -> AdminOrderSnapshot:
    try:
        return await service.get_admin_snapshot()

    except AnalyticsRepositoryError as e:
        logger.error("Failed to build admin snapshot", error=str(e), context=e.context)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build admin snapshot",
        ) from e
