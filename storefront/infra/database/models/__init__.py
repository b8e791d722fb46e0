"""
storefront.infra.database.models – SQLAlchemy 2.0 ORM models.
"""
from storefront.infra.database.models.base import Base, TimestampMixin, _uuid_pk
from storefront.infra.database.models.order import Order, OrderItem

__all__ = [
    "Base",
    "TimestampMixin",
    "_uuid_pk",
    "Order",
    "OrderItem",
]
