"""Status transition guard for admin-driven status changes.

Any non-current status is a valid target, forward or backward, as long as the
order is not already delivered or cancelled. Notifications are the caller's
job; the guard only validates and applies.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, FrozenSet, Union

from storefront.core.clock import ensure_aware
from storefront.core.exceptions import InvalidTransitionError, TerminalStateViolation
from storefront.orders.status import OrderStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusChange:
    """Outcome of a successful transition."""

    order_id: Any
    previous: OrderStatus
    current: OrderStatus
    changed_at: datetime

    @property
    def requests_review(self) -> bool:
        """Delivery opens review eligibility; the caller sends the review request."""
        return self.current is OrderStatus.DELIVERED


def allowed_targets(current: Union[str, OrderStatus]) -> FrozenSet[OrderStatus]:
    status = OrderStatus.parse(current)
    if status.is_terminal:
        return frozenset()
    return frozenset(s for s in OrderStatus if s is not status)


def transition(order: Any, new_status: Union[str, OrderStatus], now: datetime) -> StatusChange:
    """Validate and apply ``order.status = new_status``; bumps ``updated_at``.

    Raises TerminalStateViolation from delivered/cancelled and
    InvalidTransitionError when the target equals the current status.
    ``order_deadline`` and ``deadline_warning_sent`` are left alone.
    """
    current = OrderStatus.parse(order.status)
    target = OrderStatus.parse(new_status)

    if current.is_terminal:
        raise TerminalStateViolation(
            "Order is already finalized",
            details={"order_id": str(order.id), "status": current.value, "requested": target.value},
        )
    if target is current:
        raise InvalidTransitionError(
            f"Order is already {current.value}",
            details={"order_id": str(order.id), "status": current.value},
        )

    now = ensure_aware(now)
    order.status = target.value
    order.updated_at = now
    logger.info("StatusGuard: order %s %s -> %s", order.id, current.value, target.value)
    return StatusChange(order_id=order.id, previous=current, current=target, changed_at=now)
