"""OrderNotificationService: customer/admin emails triggered by order events.

Mail failures are logged and swallowed here. By the time these run, the order
or status change is already committed and must not be undone by a bounce.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from storefront.config.store import StoreConfig
from storefront.core.exceptions import MissingRecipient, NotificationDispatchFailure
from storefront.notifications import templates
from storefront.notifications.dispatcher import NotificationDispatcher, Recipient
from storefront.notifications.templates import RenderedEmail
from storefront.orders.transitions import StatusChange

logger = logging.getLogger(__name__)


def customer_recipient(order: Any) -> Recipient:
    """The order's customer as a mail recipient; MissingRecipient for guest/legacy orders."""
    email = (order.customer_email or "").strip()
    if not email:
        raise MissingRecipient(
            f"Order {order.order_code} has no customer email",
            details={"order_id": str(order.id)},
        )
    return Recipient(email=email, name=order.customer_name)


class OrderNotificationService:
    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        store_config: StoreConfig,
        *,
        admin_email: Optional[str] = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._config = store_config
        self._admin_email = admin_email

    async def notify_order_placed(self, order: Any) -> List[str]:
        """Admin copy (when an admin address is configured) and customer confirmation."""
        sent: List[str] = []
        if self._admin_email:
            email = templates.order_placed_admin(order, self._config)
            if await self._send(Recipient(self._admin_email, "Admin"), email):
                sent.append(email.subject)
        try:
            recipient = customer_recipient(order)
        except MissingRecipient:
            logger.info("OrderNotifications: order %s has no email, no confirmation sent", order.order_code)
            return sent
        email = templates.order_placed_customer(order, self._config)
        if await self._send(recipient, email):
            sent.append(email.subject)
        return sent

    async def notify_status_change(self, order: Any, change: StatusChange) -> List[str]:
        """Status update email; delivery additionally asks for a review."""
        try:
            recipient = customer_recipient(order)
        except MissingRecipient:
            logger.info(
                "OrderNotifications: order %s has no email, skipping %s notice",
                order.order_code, change.current.value,
            )
            return []
        emails = [templates.status_update(order, change.current, self._config)]
        if change.requests_review:
            emails.append(templates.review_request(order, self._config))
        sent: List[str] = []
        for email in emails:
            if await self._send(recipient, email):
                sent.append(email.subject)
        return sent

    async def _send(self, recipient: Recipient, email: RenderedEmail) -> bool:
        try:
            await self._dispatcher.send([recipient], email.subject, email.html)
        except NotificationDispatchFailure as exc:
            logger.warning(
                "OrderNotifications: %r to %s failed: %s", email.subject, recipient.email, exc,
            )
            return False
        return True
