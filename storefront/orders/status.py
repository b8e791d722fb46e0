"""Order status enumeration. Raw strings are parsed once at the boundary."""
from __future__ import annotations

from enum import Enum
from typing import Union

from storefront.core.exceptions import InvalidStatusError


class OrderStatus(str, Enum):
    """The five order statuses. Stored lowercase."""
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, raw: Union[str, "OrderStatus", None]) -> "OrderStatus":
        """Case-insensitive parse ("Pending", " PAID "); legacy rows used capitalised values."""
        if isinstance(raw, cls):
            return raw
        value = (raw or "").strip().lower()
        try:
            return cls(value)
        except ValueError:
            raise InvalidStatusError(
                f"Unknown order status {raw!r}",
                details={"allowed": [s.value for s in cls]},
            ) from None

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def label(self) -> str:
        return self.value.capitalize()


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})
