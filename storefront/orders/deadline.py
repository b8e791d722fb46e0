"""Edit-window deadline policy.

Pure functions over ``(status, order_deadline, now)``. Nothing here reads the
wall clock, so a display timer may call :func:`evaluate` every second.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from storefront.core.clock import ensure_aware
from storefront.orders.status import OrderStatus

_MS_PER_HOUR = 3_600_000
_MS_PER_MINUTE = 60_000
_MS_PER_SECOND = 1_000


def remaining_ms(order_deadline: Optional[datetime], now: datetime) -> int:
    """Whole milliseconds until the deadline, clamped at 0. No deadline means 0."""
    if order_deadline is None:
        return 0
    delta = ensure_aware(order_deadline) - ensure_aware(now)
    return max(0, delta // timedelta(milliseconds=1))


def is_editable(
    status: Union[str, OrderStatus],
    order_deadline: Optional[datetime],
    now: datetime,
) -> bool:
    return (
        OrderStatus.parse(status) is OrderStatus.PENDING
        and order_deadline is not None
        and remaining_ms(order_deadline, now) > 0
    )


def is_expired(order_deadline: Optional[datetime], now: datetime) -> bool:
    return order_deadline is not None and remaining_ms(order_deadline, now) == 0


def minutes_remaining(order_deadline: Optional[datetime], now: datetime) -> int:
    """Rounded minutes left, half rounding up (1m30s -> 2)."""
    ms = remaining_ms(order_deadline, now)
    return (ms + _MS_PER_MINUTE // 2) // _MS_PER_MINUTE


def format_remaining(ms: int) -> str:
    """Countdown label: ``1h 05m 09s`` from one hour up, else ``4m 09s``. Always floors."""
    ms = max(0, int(ms))
    hours = ms // _MS_PER_HOUR
    minutes = (ms % _MS_PER_HOUR) // _MS_PER_MINUTE
    seconds = (ms % _MS_PER_MINUTE) // _MS_PER_SECOND
    if hours >= 1:
        return f"{hours}h {minutes:02d}m {seconds:02d}s"
    return f"{minutes}m {seconds:02d}s"


def compute_deadline(created_at: datetime, window: timedelta) -> datetime:
    return ensure_aware(created_at) + window


@dataclass(frozen=True)
class DeadlineState:
    """Snapshot of the edit window at one instant."""

    remaining_ms: int
    editable: bool
    expired: bool
    label: str

    def to_dict(self) -> dict:
        return {
            "remaining_ms": self.remaining_ms,
            "editable": self.editable,
            "expired": self.expired,
            "label": self.label,
        }


def evaluate(
    status: Union[str, OrderStatus],
    order_deadline: Optional[datetime],
    now: datetime,
) -> DeadlineState:
    ms = remaining_ms(order_deadline, now)
    return DeadlineState(
        remaining_ms=ms,
        editable=is_editable(status, order_deadline, now),
        expired=is_expired(order_deadline, now),
        label=format_remaining(ms),
    )
