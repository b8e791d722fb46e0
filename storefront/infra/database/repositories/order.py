"""Order repository: the order store behind the checkout, edit gate, admin and scanner."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import selectinload

from storefront.infra.database.models.order import Order, OrderItem
from storefront.infra.database.repositories.base import BaseRepository
from storefront.orders.status import OrderStatus

_TRACKING_LIMIT = 20


def _status_is(status: OrderStatus):
    # Legacy rows were written as "Pending", "Delivered", ...
    return func.lower(Order.status) == status.value


class OrderRepository(BaseRepository[Order]):
    model = Order

    async def get_with_items(self, id: UUID) -> Optional[Order]:
        stmt = select(Order).where(Order.id == id).options(selectinload(Order.items))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_code(self, order_code: str) -> Optional[Order]:
        stmt = select(Order).where(Order.order_code == order_code.strip().upper())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def code_exists(self, order_code: str) -> bool:
        stmt = select(Order.id).where(Order.order_code == order_code).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar() is not None

    async def list_all(
        self,
        *,
        status: Optional[OrderStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Order]:
        stmt = select(Order).order_by(Order.created_at.desc())
        if status is not None:
            stmt = stmt.where(_status_is(status))
        if search:
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    Order.order_code.ilike(pattern),
                    Order.customer_name.ilike(pattern),
                    Order.customer_phone.ilike(pattern),
                )
            )
        stmt = stmt.offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_for_tracking(
        self,
        *,
        order_ref: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> List[Order]:
        """Public lookup by order code (or raw UUID) or by phone number, newest first."""
        stmt = select(Order).order_by(Order.created_at.desc()).limit(_TRACKING_LIMIT)
        if order_ref:
            ref = order_ref.strip()
            try:
                stmt = stmt.where(or_(Order.order_code == ref.upper(), Order.id == UUID(ref)))
            except ValueError:
                stmt = stmt.where(Order.order_code == ref.upper())
        elif phone:
            stmt = stmt.where(Order.customer_phone == phone.strip())
        else:
            return []
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_with_items(
        self,
        order_data: Dict[str, Any],
        items: List[Dict[str, Any]],
    ) -> Order:
        order = Order(**order_data)
        order.items = [OrderItem(**item) for item in items]
        self.session.add(order)
        await self.session.flush()
        await self.session.refresh(order)
        return order

    async def update_status(
        self, id: UUID, status: OrderStatus, now: datetime,
    ) -> Optional[Order]:
        return await self.update(id, {"status": status.value, "updated_at": now})

    async def update_if_editable(
        self, id: UUID, changes: Dict[str, Any], now: datetime,
    ) -> bool:
        """Write customer edits only if the window is still open at write time."""
        stmt = (
            update(Order)
            .where(
                Order.id == id,
                _status_is(OrderStatus.PENDING),
                Order.order_deadline.is_not(None),
                Order.order_deadline > now,
            )
            .values(**changes)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0

    # ── Deadline warning scan ─────────────────────────────────────────────────

    async def due_for_deadline_warning(
        self, now: datetime, window: timedelta,
    ) -> List[Order]:
        """Pending, not yet warned, deadline in ``(now, now + window]``."""
        stmt = (
            select(Order)
            .where(
                _status_is(OrderStatus.PENDING),
                Order.deadline_warning_sent.is_(False),
                Order.order_deadline.is_not(None),
                Order.order_deadline <= now + window,
                Order.order_deadline > now,
            )
            .order_by(Order.order_deadline)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def is_deadline_warning_pending(self, id: UUID, now: datetime) -> bool:
        """Fresh re-check just before sending; the selection snapshot may be stale by now.

        The order must still be pending, unwarned and before its deadline.
        """
        stmt = select(Order.id).where(
            Order.id == id,
            _status_is(OrderStatus.PENDING),
            Order.deadline_warning_sent.is_(False),
            Order.order_deadline > now,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def mark_deadline_warning_sent(self, id: UUID, now: datetime) -> bool:
        """Compare-and-set false -> true. False means another scan got there first."""
        stmt = (
            update(Order)
            .where(Order.id == id, Order.deadline_warning_sent.is_(False))
            .values(deadline_warning_sent=True, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0
