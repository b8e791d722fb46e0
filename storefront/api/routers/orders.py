"""Admin orders API: list, get, change status."""
from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies import get_clock, get_notifications, get_session, get_store_config
from storefront.api.errors import to_http
from storefront.api.schemas.orders import OrderResponse, OrderStatusUpdate
from storefront.config.store import StoreConfig
from storefront.core.clock import Clock
from storefront.core.exceptions import ProjectError
from storefront.services.order_notification_service import OrderNotificationService
from storefront.services.order_service import OrderService


router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    status: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    session: AsyncSession = Depends(get_session),
    store_config: StoreConfig = Depends(get_store_config),
):
    """List orders, newest first, optionally filtered by status or code/name/phone search."""
    svc = OrderService(session, store_config=store_config)
    try:
        items = await svc.list_orders(status=status, search=search, skip=skip, limit=limit)
    except ProjectError as exc:
        raise to_http(exc) from exc
    return [OrderResponse.model_validate(o) for o in items]


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    store_config: StoreConfig = Depends(get_store_config),
):
    svc = OrderService(session, store_config=store_config)
    try:
        order = await svc.get_order(order_id)
    except ProjectError as exc:
        raise to_http(exc) from exc
    return OrderResponse.model_validate(order)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    body: OrderStatusUpdate,
    session: AsyncSession = Depends(get_session),
    store_config: StoreConfig = Depends(get_store_config),
    clock: Clock = Depends(get_clock),
    notifications: OrderNotificationService = Depends(get_notifications),
):
    """Move an order to another status; delivered and cancelled are final.

    The customer is emailed after the change is committed.
    """
    svc = OrderService(session, store_config=store_config, clock=clock)
    try:
        order, change = await svc.change_status(order_id, body.status)
    except ProjectError as exc:
        raise to_http(exc) from exc
    await session.commit()
    await notifications.notify_status_change(order, change)
    return OrderResponse.model_validate(order)
