"""Tests for OrderNotificationService."""
import asyncio
import unittest
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from storefront.config.store import StoreConfig
from storefront.core.exceptions import MissingRecipient, NotificationDispatchFailure
from storefront.orders.status import OrderStatus
from storefront.orders.transitions import StatusChange
from storefront.services.order_notification_service import (
    OrderNotificationService,
    customer_recipient,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _run(coro):
    return asyncio.run(coro)


def _order(**kwargs):
    defaults = {
        "id": uuid4(),
        "order_code": "ORD-7KQ2M9XA",
        "customer_name": "Ada Obi",
        "customer_phone": "08030000000",
        "customer_email": "ada@example.com",
        "delivery_address": "12 Allen Avenue",
        "total_amount": Decimal("5000.00"),
        "created_at": NOW,
        "items": [SimpleNamespace(product_name="Soap", quantity=2, subtotal=Decimal("5000.00"))],
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def _change(order, previous, current):
    return StatusChange(order_id=order.id, previous=previous, current=current, changed_at=NOW)


def _service(admin_email="admin@shop.example.com"):
    dispatcher = MagicMock()
    dispatcher.send = AsyncMock()
    return OrderNotificationService(dispatcher, StoreConfig(), admin_email=admin_email), dispatcher


class TestCustomerRecipient(unittest.TestCase):
    def test_recipient(self):
        r = customer_recipient(_order(customer_email=" ada@example.com "))
        self.assertEqual((r.email, r.name), ("ada@example.com", "Ada Obi"))

    def test_missing_email(self):
        with self.assertRaises(MissingRecipient):
            customer_recipient(_order(customer_email=""))


class TestNotifyOrderPlaced(unittest.TestCase):
    def test_admin_and_customer(self):
        svc, dispatcher = _service()
        sent = _run(svc.notify_order_placed(_order()))
        self.assertEqual(len(sent), 2)
        recipients = [call.args[0][0].email for call in dispatcher.send.await_args_list]
        self.assertEqual(recipients, ["admin@shop.example.com", "ada@example.com"])

    def test_guest_without_email_only_admin(self):
        svc, dispatcher = _service()
        sent = _run(svc.notify_order_placed(_order(customer_email=None)))
        self.assertEqual(sent, ["🛒 New Order ORD-7KQ2M9XA - ₦5,000"])

    def test_no_admin_configured(self):
        svc, dispatcher = _service(admin_email=None)
        sent = _run(svc.notify_order_placed(_order()))
        self.assertEqual(sent, ["Order Confirmed! - ORD-7KQ2M9XA"])

    def test_dispatch_failure_swallowed(self):
        svc, dispatcher = _service()
        dispatcher.send = AsyncMock(side_effect=NotificationDispatchFailure("HTTP 500"))
        self.assertEqual(_run(svc.notify_order_placed(_order())), [])


class TestNotifyStatusChange(unittest.TestCase):
    def test_status_update(self):
        svc, dispatcher = _service()
        order = _order()
        sent = _run(svc.notify_status_change(order, _change(order, OrderStatus.PAID, OrderStatus.SHIPPED)))
        self.assertEqual(sent, ["Order ORD-7KQ2M9XA - Status: Shipped"])

    def test_delivered_adds_review_request(self):
        svc, dispatcher = _service()
        order = _order()
        sent = _run(svc.notify_status_change(order, _change(order, OrderStatus.SHIPPED, OrderStatus.DELIVERED)))
        self.assertEqual(sent, [
            "Order ORD-7KQ2M9XA - Status: Delivered",
            "How was your order ORD-7KQ2M9XA? Leave a review",
        ])

    def test_no_email_no_notice(self):
        svc, dispatcher = _service()
        order = _order(customer_email=None)
        sent = _run(svc.notify_status_change(order, _change(order, OrderStatus.PENDING, OrderStatus.PAID)))
        self.assertEqual(sent, [])
        dispatcher.send.assert_not_awaited()


if __name__ == "__main__":
    unittest.main()
