"""Shop API (public): checkout, tracking, edit window countdown, customer edits."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies import get_clock, get_notifications, get_session, get_store_config
from storefront.api.errors import to_http
from storefront.api.rate_limit import TRACKING_RATE_LIMIT, limiter
from storefront.api.schemas.orders import (
    CheckoutRequest,
    DeadlineStateResponse,
    OrderEditRequest,
    OrderResponse,
    TrackedOrderResponse,
)
from storefront.config.store import StoreConfig
from storefront.core.clock import Clock
from storefront.core.exceptions import ProjectError
from storefront.orders.checkout import CartLine, CustomerDetails
from storefront.orders.deadline import evaluate
from storefront.services.order_notification_service import OrderNotificationService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/shop", tags=["shop"])


@router.post("/orders", response_model=OrderResponse, status_code=201)
async def place_order(
    body: CheckoutRequest,
    session: AsyncSession = Depends(get_session),
    store_config: StoreConfig = Depends(get_store_config),
    clock: Clock = Depends(get_clock),
    notifications: OrderNotificationService = Depends(get_notifications),
):
    """Checkout. Opens the edit window and emails the admin and customer."""
    svc = OrderService(session, store_config=store_config, clock=clock)
    customer = CustomerDetails(
        name=body.customer_name,
        phone=body.customer_phone,
        address=body.delivery_address,
        email=body.customer_email,
    )
    lines = [
        CartLine(product_name=i.product_name, product_price=i.product_price, quantity=i.quantity)
        for i in body.items
    ]
    try:
        order = await svc.place_order(customer, lines)
    except ProjectError as exc:
        raise to_http(exc) from exc
    await session.commit()
    await notifications.notify_order_placed(order)
    return OrderResponse.model_validate(order)


@router.get("/orders/track", response_model=List[TrackedOrderResponse])
@limiter.limit(TRACKING_RATE_LIMIT)
async def track_orders(
    request: Request,
    order_ref: Optional[str] = None,
    phone: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
    store_config: StoreConfig = Depends(get_store_config),
):
    """Look up orders by order code (or id) or by phone number."""
    svc = OrderService(session, store_config=store_config)
    try:
        orders = await svc.track_orders(order_ref=order_ref, phone=phone)
    except ProjectError as exc:
        raise to_http(exc) from exc
    return [TrackedOrderResponse.model_validate(o) for o in orders]


@router.get("/orders/{order_id}/deadline", response_model=DeadlineStateResponse)
async def get_deadline(
    order_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    store_config: StoreConfig = Depends(get_store_config),
    clock: Clock = Depends(get_clock),
):
    """Edit window countdown, computed with the server clock."""
    svc = OrderService(session, store_config=store_config, clock=clock)
    try:
        order = await svc.get_order(order_id)
    except ProjectError as exc:
        raise to_http(exc) from exc
    state = evaluate(order.status, order.order_deadline, clock())
    return DeadlineStateResponse(
        order_id=order.id, order_deadline=order.order_deadline, **state.to_dict()
    )


@router.patch("/orders/{order_id}/details", response_model=OrderResponse)
async def edit_order_details(
    order_id: uuid.UUID,
    body: OrderEditRequest,
    session: AsyncSession = Depends(get_session),
    store_config: StoreConfig = Depends(get_store_config),
    clock: Clock = Depends(get_clock),
):
    """Customer edit of name, phone and delivery address while the window is open."""
    svc = OrderService(session, store_config=store_config, clock=clock)
    fields = body.model_dump(exclude_unset=True)
    fields.update(body.model_extra or {})
    try:
        order = await svc.edit_order(order_id, fields)
    except ProjectError as exc:
        raise to_http(exc) from exc
    return OrderResponse.model_validate(order)
