"""Outbound notifications: dispatcher contract, Brevo/no-op dispatchers, email templates."""
from storefront.notifications.dispatcher import (
    BrevoDispatcher,
    NoOpDispatcher,
    NotificationDispatcher,
    Recipient,
    build_dispatcher,
)
from storefront.notifications.templates import RenderedEmail, format_currency

__all__ = [
    "NotificationDispatcher",
    "BrevoDispatcher",
    "NoOpDispatcher",
    "Recipient",
    "build_dispatcher",
    "RenderedEmail",
    "format_currency",
]
