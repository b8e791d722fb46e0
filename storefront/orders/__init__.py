"""Order domain: status enum, deadline policy, transition guard, edit gate, checkout.

Everything in this package is pure; ``now`` is always passed in.
"""
from storefront.orders.checkout import (
    CartLine,
    CustomerDetails,
    OrderDraft,
    build_order_draft,
    generate_order_code,
)
from storefront.orders.deadline import (
    DeadlineState,
    evaluate,
    format_remaining,
    is_editable,
    is_expired,
    minutes_remaining,
    remaining_ms,
)
from storefront.orders.edit_gate import EDITABLE_FIELDS, attempt_edit
from storefront.orders.status import TERMINAL_STATUSES, OrderStatus
from storefront.orders.transitions import StatusChange, allowed_targets, transition

__all__ = [
    "OrderStatus",
    "TERMINAL_STATUSES",
    "DeadlineState",
    "evaluate",
    "format_remaining",
    "is_editable",
    "is_expired",
    "minutes_remaining",
    "remaining_ms",
    "StatusChange",
    "allowed_targets",
    "transition",
    "EDITABLE_FIELDS",
    "attempt_edit",
    "CartLine",
    "CustomerDetails",
    "OrderDraft",
    "build_order_draft",
    "generate_order_code",
]
