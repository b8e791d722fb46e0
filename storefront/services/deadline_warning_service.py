"""DeadlineWarningService: warn customers whose edit window is about to close.

One scan = select due orders, email each once, flip ``deadline_warning_sent``.

Delivery semantics
------------------
The flag is written only after the provider accepted the message, so a failed
send is retried on the next scan. The flag write is a conditional UPDATE
(false -> true); if two scans overlap, the loser sees rowcount 0. If the flag
write itself fails after a successful send, the order stays eligible and the
customer may get the warning twice. That at-least-once window is accepted;
there is no two-phase commit with the mail provider.

Each due order is counted once per scan: ``processed`` (sent and flagged),
``skipped`` (no email, no longer eligible at send time, or flagged by a
concurrent scan first) or one entry in ``errors``. Any per-order exception is
recorded and the batch moves on; only a failed selection aborts the scan.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config.store import StoreConfig
from storefront.core.clock import Clock, ensure_aware, utcnow
from storefront.core.exceptions import ExternalServiceError, MissingRecipient, ProjectError
from storefront.infra.database.repositories.order import OrderRepository
from storefront.notifications import templates
from storefront.notifications.dispatcher import NotificationDispatcher
from storefront.orders.deadline import minutes_remaining
from storefront.services.order_notification_service import customer_recipient

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    processed: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"processed": self.processed, "skipped": self.skipped, "errors": list(self.errors)}


@dataclass(frozen=True)
class DueOrder:
    """Columns captured at selection time.

    Plain values, so a per-order rollback (which expires ORM instances) cannot
    break the rest of the batch.
    """

    id: UUID
    order_code: str
    customer_name: str
    customer_email: Optional[str]
    total_amount: Decimal
    order_deadline: datetime

    @classmethod
    def from_order(cls, order: Any) -> "DueOrder":
        return cls(
            id=order.id,
            order_code=order.order_code,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            total_amount=order.total_amount,
            order_deadline=order.order_deadline,
        )


class DeadlineWarningService:
    def __init__(
        self,
        session: AsyncSession,
        dispatcher: NotificationDispatcher,
        *,
        store_config: Optional[StoreConfig] = None,
        clock: Clock = utcnow,
    ) -> None:
        self._session = session
        self._repo = OrderRepository(session)
        self._dispatcher = dispatcher
        self._config = store_config or StoreConfig()
        self._clock = clock

    async def find_due(self, now: Optional[datetime] = None) -> List[DueOrder]:
        """Orders matching the warning predicate at ``now``. Store failures abort the scan."""
        now = ensure_aware(now if now is not None else self._clock())
        try:
            orders = await self._repo.due_for_deadline_warning(now, self._config.warning_window)
        except SQLAlchemyError as exc:
            raise ExternalServiceError(
                "Could not load orders for the deadline warning scan", cause=exc,
            ) from exc
        return [DueOrder.from_order(o) for o in orders]

    async def scan(self, now: Optional[datetime] = None) -> ScanResult:
        now = ensure_aware(now if now is not None else self._clock())
        due = await self.find_due(now)
        result = ScanResult()
        logger.info("DeadlineWarning: %d order(s) nearing deadline", len(due))
        for order in due:
            await self._process(order, now, result)
        logger.info(
            "DeadlineWarning: scan complete",
            extra={"processed": result.processed, "skipped": result.skipped, "errors": len(result.errors)},
        )
        return result

    async def _process(self, order: DueOrder, now: datetime, result: ScanResult) -> None:
        try:
            recipient = customer_recipient(order)
        except MissingRecipient:
            logger.info("DeadlineWarning: order %s has no customer email, skipping", order.order_code)
            result.skipped += 1
            return

        try:
            if not await self._repo.is_deadline_warning_pending(order.id, now):
                logger.info(
                    "DeadlineWarning: order %s no longer eligible (warned, status changed or expired)",
                    order.order_code,
                )
                result.skipped += 1
                return
            minutes = minutes_remaining(order.order_deadline, now)
            email = templates.deadline_warning(order, minutes, self._config)
            await self._dispatcher.send([recipient], email.subject, email.html)
        except (ProjectError, SQLAlchemyError) as exc:
            message = f"Failed to process order {order.order_code}: {exc}"
            logger.error("DeadlineWarning: %s", message)
            result.errors.append(message)
            await self._safe_rollback()
            return
        except Exception as exc:
            message = f"Failed to process order {order.order_code}: {type(exc).__name__}: {exc}"
            logger.exception("DeadlineWarning: %s", message)
            result.errors.append(message)
            await self._safe_rollback()
            return

        try:
            marked = await self._repo.mark_deadline_warning_sent(order.id, now)
            await self._session.commit()
        except SQLAlchemyError as exc:
            message = (
                f"Warning for order {order.order_code} was sent but the flag was not saved "
                f"(may be sent again): {exc}"
            )
            logger.error("DeadlineWarning: %s", message)
            result.errors.append(message)
            await self._safe_rollback()
            return

        if not marked:
            logger.warning(
                "DeadlineWarning: order %s was flagged by a concurrent scan", order.order_code,
            )
            result.skipped += 1
            return
        logger.info(
            "DeadlineWarning: sent warning for order %s (%d min left)",
            order.order_code, minutes,
            extra={"order_code": order.order_code, "minutes_remaining": minutes},
        )
        result.processed += 1

    async def _safe_rollback(self) -> None:
        try:
            await self._session.rollback()
        except SQLAlchemyError as exc:
            logger.warning("DeadlineWarning: rollback failed: %s", exc)
