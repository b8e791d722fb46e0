"""Tests for DeadlineWarningService with an in-memory order store."""
from __future__ import annotations

import asyncio
import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import List
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from storefront.config.store import StoreConfig
from storefront.core.exceptions import ExternalServiceError, NotificationDispatchFailure
from storefront.notifications.dispatcher import NotificationDispatcher
from storefront.orders.deadline import is_editable
from storefront.services.deadline_warning_service import DeadlineWarningService

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
CONFIG = StoreConfig(app_url="https://shop.example.com")


def _run(coro):
    return asyncio.run(coro)


def _order(deadline_in: timedelta = timedelta(minutes=10), **kwargs):
    defaults = {
        "id": uuid4(),
        "order_code": "ORD-" + uuid4().hex[:8].upper(),
        "customer_name": "Ada Obi",
        "customer_email": "ada@example.com",
        "total_amount": Decimal("12500.00"),
        "status": "pending",
        "order_deadline": T0 + deadline_in,
        "deadline_warning_sent": False,
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


class FakeOrderRepository:
    """Applies the warning predicate and the flag CAS to a list of orders."""

    def __init__(self, orders):
        self.orders = {o.id: o for o in orders}
        self.fail_select = False
        self.fail_mark_for = set()

    async def due_for_deadline_warning(self, now, window):
        if self.fail_select:
            raise OperationalError("SELECT", {}, Exception("connection refused"))
        due = [
            o for o in self.orders.values()
            if o.status.lower() == "pending"
            and o.deadline_warning_sent is False
            and o.order_deadline is not None
            and now < o.order_deadline <= now + window
        ]
        return sorted(due, key=lambda o: o.order_deadline)

    async def is_deadline_warning_pending(self, id, now):
        order = self.orders[id]
        return (
            order.status.lower() == "pending"
            and order.deadline_warning_sent is False
            and order.order_deadline > now
        )

    async def mark_deadline_warning_sent(self, id, now):
        if id in self.fail_mark_for:
            raise SQLAlchemyError("deadlock detected")
        order = self.orders[id]
        if order.deadline_warning_sent:
            return False
        order.deadline_warning_sent = True
        return True


class RecordingDispatcher(NotificationDispatcher):
    def __init__(self, fail_for: tuple = ()):
        self.sent: List[tuple] = []
        self.fail_for = set(fail_for)

    @property
    def provider(self) -> str:
        return "recording"

    async def send(self, recipients, subject, html_body):
        if recipients[0].email in self.fail_for:
            raise NotificationDispatchFailure("Email provider returned HTTP 500")
        self.sent.append((recipients[0].email, subject))


class CrashingDispatcher(RecordingDispatcher):
    """Raises a non-provider error, as a broken transport would."""

    async def send(self, recipients, subject, html_body):
        if recipients[0].email in self.fail_for:
            raise RuntimeError("smtp socket reset")
        self.sent.append((recipients[0].email, subject))


class TestDeadlineWarningService(unittest.TestCase):
    def _service(self, orders, dispatcher=None):
        session = MagicMock()
        session.commit = AsyncMock()
        session.rollback = AsyncMock()
        dispatcher = dispatcher or RecordingDispatcher()
        svc = DeadlineWarningService(session, dispatcher, store_config=CONFIG, clock=lambda: T0)
        repo = FakeOrderRepository(orders)
        svc._repo = repo
        return svc, repo, dispatcher, session

    def test_warns_due_order_once(self):
        order = _order(timedelta(minutes=10), order_code="ORD-7KQ2M9XA")
        svc, repo, dispatcher, session = self._service([order])

        result = _run(svc.scan())

        self.assertEqual(result.to_dict(), {"processed": 1, "skipped": 0, "errors": []})
        self.assertTrue(order.deadline_warning_sent)
        self.assertEqual(dispatcher.sent, [
            ("ada@example.com", "⏰ Only 10 Minutes Left to Edit Order ORD-7KQ2M9XA"),
        ])
        session.commit.assert_awaited_once()

    def test_second_scan_sends_nothing(self):
        svc, repo, dispatcher, _ = self._service([_order(timedelta(minutes=10))])
        _run(svc.scan(T0))
        result = _run(svc.scan(T0 + timedelta(minutes=2)))
        self.assertEqual(result.processed, 0)
        self.assertEqual(len(dispatcher.sent), 1)

    def test_window_boundaries(self):
        inside = _order(timedelta(minutes=15))
        too_far = _order(timedelta(minutes=20))
        expired = _order(timedelta(minutes=-1))
        at_now = _order(timedelta(0))
        svc, repo, dispatcher, _ = self._service([inside, too_far, expired, at_now])

        result = _run(svc.scan(T0))

        self.assertEqual(result.processed, 1)
        self.assertTrue(inside.deadline_warning_sent)
        self.assertFalse(too_far.deadline_warning_sent)
        self.assertFalse(expired.deadline_warning_sent)
        self.assertFalse(at_now.deadline_warning_sent)

    def test_non_pending_not_selected(self):
        paid = _order(timedelta(minutes=5), status="paid")
        legacy = _order(timedelta(minutes=5), status="Pending")
        svc, repo, dispatcher, _ = self._service([paid, legacy])
        result = _run(svc.scan(T0))
        self.assertEqual(result.processed, 1)
        self.assertFalse(paid.deadline_warning_sent)
        self.assertTrue(legacy.deadline_warning_sent)

    def test_missing_email_skipped_and_flag_left_unset(self):
        order = _order(customer_email=None)
        svc, repo, dispatcher, _ = self._service([order])
        result = _run(svc.scan(T0))
        self.assertEqual(result.to_dict(), {"processed": 0, "skipped": 1, "errors": []})
        self.assertFalse(order.deadline_warning_sent)
        self.assertEqual(dispatcher.sent, [])

    def test_dispatch_failure_leaves_order_eligible(self):
        failing = _order(customer_email="bounce@example.com", order_code="ORD-FAIL2222")
        ok = _order()
        dispatcher = RecordingDispatcher(fail_for=("bounce@example.com",))
        svc, repo, _, session = self._service([failing, ok], dispatcher)

        result = _run(svc.scan(T0))

        self.assertEqual(result.processed, 1)
        self.assertEqual(len(result.errors), 1)
        self.assertIn("ORD-FAIL2222", result.errors[0])
        self.assertFalse(failing.deadline_warning_sent)
        self.assertTrue(ok.deadline_warning_sent)
        session.rollback.assert_awaited()

        dispatcher.fail_for.clear()
        retry = _run(svc.scan(T0 + timedelta(minutes=1)))
        self.assertEqual(retry.processed, 1)
        self.assertTrue(failing.deadline_warning_sent)

    def test_unexpected_dispatch_error_does_not_abort_scan(self):
        crashing = _order(timedelta(minutes=5), customer_email="crash@example.com", order_code="ORD-CRSH6666")
        ok = _order(timedelta(minutes=10))
        dispatcher = CrashingDispatcher(fail_for=("crash@example.com",))
        svc, repo, _, session = self._service([crashing, ok], dispatcher)

        result = _run(svc.scan(T0))

        self.assertEqual(result.processed, 1)
        self.assertEqual(len(result.errors), 1)
        self.assertIn("ORD-CRSH6666", result.errors[0])
        self.assertIn("RuntimeError", result.errors[0])
        self.assertFalse(crashing.deadline_warning_sent)
        self.assertTrue(ok.deadline_warning_sent)
        self.assertEqual(dispatcher.sent, [
            ("ada@example.com", f"⏰ Only 10 Minutes Left to Edit Order {ok.order_code}"),
        ])
        session.rollback.assert_awaited()

    def test_flag_write_failure_reported(self):
        order = _order(order_code="ORD-FLAG3333")
        svc, repo, dispatcher, _ = self._service([order])
        repo.fail_mark_for.add(order.id)

        result = _run(svc.scan(T0))

        self.assertEqual(result.processed, 0)
        self.assertEqual(len(dispatcher.sent), 1)
        self.assertIn("may be sent again", result.errors[0])
        self.assertFalse(order.deadline_warning_sent)

    def test_concurrent_scan_already_flagged(self):
        order = _order()
        svc, repo, dispatcher, _ = self._service([order])

        async def _flag_first(id, now):
            repo.orders[id].deadline_warning_sent = True
            return False

        repo.is_deadline_warning_pending = _flag_first
        result = _run(svc.scan(T0))
        self.assertEqual(result.to_dict(), {"processed": 0, "skipped": 1, "errors": []})
        self.assertEqual(dispatcher.sent, [])

    def test_flag_lost_to_concurrent_scan_counts_as_skipped(self):
        order = _order(order_code="ORD-RACE5555")
        svc, repo, dispatcher, session = self._service([order])

        async def _lose_race(id, now):
            return False

        repo.mark_deadline_warning_sent = _lose_race
        result = _run(svc.scan(T0))
        self.assertEqual(result.to_dict(), {"processed": 0, "skipped": 1, "errors": []})
        self.assertEqual(len(dispatcher.sent), 1)
        session.commit.assert_awaited_once()

    def test_status_change_after_selection_sends_nothing(self):
        order = _order(timedelta(minutes=5))
        svc, repo, dispatcher, _ = self._service([order])
        select_due = repo.due_for_deadline_warning

        async def _cancel_after_select(now, window):
            due = await select_due(now, window)
            order.status = "cancelled"
            return due

        repo.due_for_deadline_warning = _cancel_after_select
        result = _run(svc.scan(T0))
        self.assertEqual(result.to_dict(), {"processed": 0, "skipped": 1, "errors": []})
        self.assertEqual(dispatcher.sent, [])
        self.assertFalse(order.deadline_warning_sent)

    def test_expired_before_send_sends_nothing(self):
        order = _order(timedelta(minutes=5))
        svc, repo, dispatcher, _ = self._service([order])
        select_due = repo.due_for_deadline_warning

        async def _expire_after_select(now, window):
            due = await select_due(now, window)
            order.order_deadline = now
            return due

        repo.due_for_deadline_warning = _expire_after_select
        result = _run(svc.scan(T0))
        self.assertEqual(result.skipped, 1)
        self.assertEqual(dispatcher.sent, [])

    def test_minutes_rounded_in_subject(self):
        order = _order(timedelta(minutes=14, seconds=31), order_code="ORD-ROUND444")
        svc, repo, dispatcher, _ = self._service([order])
        _run(svc.scan(T0))
        self.assertEqual(dispatcher.sent[0][1], "⏰ Only 15 Minutes Left to Edit Order ORD-ROUND444")

    def test_order_lifecycle_through_scans(self):
        # Placed at T0 with a 30 minute window
        order = _order(timedelta(minutes=30))
        svc, repo, dispatcher, _ = self._service([order])

        self.assertEqual(_run(svc.scan(T0 + timedelta(minutes=10))).processed, 0)
        self.assertEqual(_run(svc.scan(T0 + timedelta(minutes=16))).processed, 1)
        self.assertEqual(_run(svc.scan(T0 + timedelta(minutes=29))).processed, 0)
        self.assertEqual(_run(svc.scan(T0 + timedelta(minutes=31))).processed, 0)
        self.assertEqual(dispatcher.sent[0][1].split(" Left")[0], "⏰ Only 14 Minutes")

    def test_warned_one_minute_before_deadline_then_locked(self):
        order = _order(timedelta(minutes=30))
        svc, repo, dispatcher, _ = self._service([order])

        first = _run(svc.scan(T0 + timedelta(minutes=29)))
        self.assertEqual(first.processed, 1)
        self.assertEqual(dispatcher.sent[0][1].split(" Left")[0], "⏰ Only 1 Minute")

        second = _run(svc.scan(T0 + timedelta(minutes=31)))
        self.assertEqual(second.processed, 0)
        self.assertEqual(len(dispatcher.sent), 1)
        self.assertTrue(order.deadline_warning_sent)
        self.assertFalse(is_editable(order.status, order.order_deadline, T0 + timedelta(minutes=31)))

    def test_empty_scan(self):
        svc, _, dispatcher, _ = self._service([])
        self.assertEqual(_run(svc.scan(T0)).to_dict(), {"processed": 0, "skipped": 0, "errors": []})

    def test_store_failure_aborts_scan(self):
        svc, repo, dispatcher, _ = self._service([_order()])
        repo.fail_select = True
        with self.assertRaises(ExternalServiceError):
            _run(svc.scan(T0))

    def test_find_due_returns_snapshots(self):
        order = _order(timedelta(minutes=3))
        svc, repo, _, _ = self._service([order])
        due = _run(svc.find_due(T0))
        self.assertEqual([d.id for d in due], [order.id])
        self.assertEqual(due[0].customer_email, "ada@example.com")


if __name__ == "__main__":
    unittest.main()
