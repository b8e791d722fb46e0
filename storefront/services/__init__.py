"""Service layer: orders, order notifications and the deadline warning scan."""
from storefront.services.deadline_warning_service import DeadlineWarningService, ScanResult
from storefront.services.order_notification_service import (
    OrderNotificationService,
    customer_recipient,
)
from storefront.services.order_service import OrderService

__all__ = [
    "OrderService",
    "OrderNotificationService",
    "DeadlineWarningService",
    "ScanResult",
    "customer_recipient",
]
