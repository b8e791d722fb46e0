"""Checkout: turn cart lines and customer details into an order draft.

Line items are price/name snapshots, not references to the catalog, so a later
price change never alters a historical order.
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Sequence

from storefront.core.clock import ensure_aware
from storefront.core.exceptions import ValidationError
from storefront.orders.deadline import compute_deadline
from storefront.orders.status import OrderStatus

# No 0/O or 1/I, codes get read out over the phone.
_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
_CODE_LENGTH = 8
ORDER_CODE_PREFIX = "ORD-"

_CENT = Decimal("0.01")


def generate_order_code() -> str:
    """Short public lookup key, e.g. ``ORD-7KQ2M9XA``. Uniqueness is checked by the caller."""
    return ORDER_CODE_PREFIX + "".join(
        secrets.choice(_CODE_ALPHABET) for _ in range(_CODE_LENGTH)
    )


def _money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CartLine:
    product_name: str
    product_price: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return _money(_money(self.product_price) * self.quantity)


@dataclass(frozen=True)
class CustomerDetails:
    name: str
    phone: str
    address: str
    email: Optional[str] = None


@dataclass
class OrderDraft:
    """Column values for a new order and its items, ready for the repository."""

    order: Dict[str, Any]
    items: List[Dict[str, Any]] = field(default_factory=list)


def _required(value: Optional[str], field_name: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field_name} is required", details={"field": field_name})
    return cleaned


def _validate_line(index: int, line: CartLine) -> None:
    if not (line.product_name or "").strip():
        raise ValidationError("Product name is required", details={"line": index})
    if not isinstance(line.quantity, int) or line.quantity < 1:
        raise ValidationError("Quantity must be at least 1", details={"line": index})
    if _money(line.product_price) < 0:
        raise ValidationError("Price cannot be negative", details={"line": index})


def build_order_draft(
    customer: CustomerDetails,
    lines: Sequence[CartLine],
    now: datetime,
    edit_window: timedelta,
) -> OrderDraft:
    """Validate the cart and compute subtotals, total and the edit deadline.

    ``order_code`` is not set here; the service assigns a unique one.
    """
    if not lines:
        raise ValidationError("Cart is empty")
    for index, line in enumerate(lines):
        _validate_line(index, line)

    now = ensure_aware(now)
    items = [
        {
            "product_name": line.product_name.strip(),
            "product_price": _money(line.product_price),
            "quantity": line.quantity,
            "subtotal": line.subtotal,
        }
        for line in lines
    ]
    total = sum((item["subtotal"] for item in items), Decimal("0.00"))
    email = (customer.email or "").strip() or None

    order = {
        "customer_name": _required(customer.name, "customer_name"),
        "customer_phone": _required(customer.phone, "customer_phone"),
        "delivery_address": _required(customer.address, "delivery_address"),
        "customer_email": email,
        "total_amount": total,
        "status": OrderStatus.PENDING.value,
        "order_deadline": compute_deadline(now, edit_window),
        "deadline_warning_sent": False,
        "created_at": now,
        "updated_at": now,
    }
    return OrderDraft(order=order, items=items)
