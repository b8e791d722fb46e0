"""Customer edit gate: contact and delivery details, only while the edit window is open."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Mapping

from storefront.core.clock import ensure_aware
from storefront.core.exceptions import EditWindowClosed, ForbiddenField, ValidationError
from storefront.orders.deadline import is_editable

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"customer_name", "customer_phone", "delivery_address"})


def check_fields(proposed: Mapping[str, Any]) -> None:
    """Reject keys outside the allowlist. Reaching this from the UI is a bug, so log loudly."""
    forbidden = sorted(set(proposed) - EDITABLE_FIELDS)
    if forbidden:
        logger.error("EditGate: rejected edit touching forbidden fields %s", forbidden)
        raise ForbiddenField(
            "Only name, phone and delivery address can be changed",
            details={"fields": forbidden},
        )


def attempt_edit(order: Any, proposed: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    """Apply an edit to ``order`` in place and return the changed columns.

    The caller must persist the returned changes with a write that re-checks
    the window at write time (see OrderRepository.update_if_editable).
    """
    check_fields(proposed)
    if not is_editable(order.status, order.order_deadline, now):
        raise EditWindowClosed(
            "The edit window for this order has expired",
            details={"order_id": str(order.id)},
        )

    changes: Dict[str, Any] = {}
    for key, value in proposed.items():
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{key} must be a non-empty string", details={"field": key})
        changes[key] = value.strip()

    if not changes:
        return {}
    changes["updated_at"] = ensure_aware(now)
    for key, value in changes.items():
        setattr(order, key, value)
    return changes
