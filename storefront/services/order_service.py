"""OrderService: checkout, customer edits, admin status changes and tracking."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config.store import StoreConfig
from storefront.core.clock import Clock, ensure_aware, utcnow
from storefront.core.exceptions import ConflictError, EditWindowClosed, NotFoundError, ValidationError
from storefront.infra.database.models.order import Order
from storefront.infra.database.repositories.order import OrderRepository
from storefront.orders.checkout import CartLine, CustomerDetails, build_order_draft, generate_order_code
from storefront.orders.deadline import DeadlineState, evaluate
from storefront.orders.edit_gate import attempt_edit
from storefront.orders.status import OrderStatus
from storefront.orders.transitions import StatusChange, transition

logger = logging.getLogger(__name__)

_CODE_ATTEMPTS = 5


class OrderService:
    def __init__(
        self,
        session: AsyncSession,
        *,
        store_config: Optional[StoreConfig] = None,
        clock: Clock = utcnow,
    ) -> None:
        self._repo = OrderRepository(session)
        self._config = store_config or StoreConfig()
        self._clock = clock

    def _now(self, now: Optional[datetime]) -> datetime:
        return ensure_aware(now if now is not None else self._clock())

    async def _unique_code(self) -> str:
        for _ in range(_CODE_ATTEMPTS):
            code = generate_order_code()
            if not await self._repo.code_exists(code):
                return code
        raise ConflictError("Could not allocate a unique order code")

    async def place_order(
        self,
        customer: CustomerDetails,
        lines: Sequence[CartLine],
        now: Optional[datetime] = None,
    ) -> Order:
        """Checkout: status pending, deadline = now + edit window, warning flag unset."""
        now = self._now(now)
        draft = build_order_draft(customer, lines, now, self._config.edit_window)
        draft.order["order_code"] = await self._unique_code()
        order = await self._repo.create_with_items(draft.order, draft.items)
        logger.info(
            "OrderService: placed order %s (%s) total=%s deadline=%s",
            order.id, order.order_code, order.total_amount, order.order_deadline,
        )
        return order

    async def get_order(self, id: UUID) -> Order:
        order = await self._repo.get_with_items(id)
        if order is None:
            raise NotFoundError(f"Order {id} not found", details={"order_id": str(id)})
        return order

    async def list_orders(
        self,
        *,
        status: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Order]:
        parsed = OrderStatus.parse(status) if status else None
        return await self._repo.list_all(status=parsed, search=search, skip=skip, limit=limit)

    async def track_orders(
        self,
        *,
        order_ref: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> List[Order]:
        order_ref = (order_ref or "").strip() or None
        phone = (phone or "").strip() or None
        if bool(order_ref) == bool(phone):
            raise ValidationError("Provide either an order ID or a phone number")
        return await self._repo.find_for_tracking(order_ref=order_ref, phone=phone)

    async def deadline_state(self, id: UUID, now: Optional[datetime] = None) -> DeadlineState:
        order = await self.get_order(id)
        return evaluate(order.status, order.order_deadline, self._now(now))

    async def edit_order(
        self,
        id: UUID,
        fields: Mapping[str, Any],
        now: Optional[datetime] = None,
    ) -> Order:
        """Customer edit of name/phone/address.

        The gate runs against a fresh read and the server clock, and the write
        repeats the window check, so a window that closes between page render
        and submit is still rejected.
        """
        now = self._now(now)
        order = await self.get_order(id)
        changes = attempt_edit(order, fields, now)
        if not changes:
            return order
        if not await self._repo.update_if_editable(order.id, changes, now):
            logger.info("OrderService: edit of %s lost the race with its deadline", order.order_code)
            raise EditWindowClosed(
                "The edit window for this order has expired",
                details={"order_id": str(order.id)},
            )
        await self._repo.session.refresh(order)
        logger.info(
            "OrderService: customer updated %s on order %s",
            sorted(k for k in changes if k != "updated_at"), order.order_code,
        )
        return order

    async def change_status(
        self,
        id: UUID,
        new_status: str,
        now: Optional[datetime] = None,
    ) -> Tuple[Order, StatusChange]:
        """Admin status change. The caller sends the notifications after commit."""
        order = await self.get_order(id)
        change = transition(order, new_status, self._now(now))
        updated = await self._repo.update_status(order.id, change.current, change.changed_at)
        return updated or order, change
