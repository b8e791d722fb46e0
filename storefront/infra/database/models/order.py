"""Order and OrderItem ORM models."""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Order(Base, TimestampMixin):
    """A customer order placed at checkout."""

    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_order_code", "order_code", unique=True),
        Index("ix_orders_customer_phone", "customer_phone"),
        Index(
            "ix_orders_deadline_scan",
            "status", "deadline_warning_sent", "order_deadline",
        ),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    # Public lookup key (e.g. ORD-7KQ2M9XA), used with the phone number for tracking
    order_code: Mapped[str] = mapped_column(String(16), nullable=False)

    # Contact/delivery details; customer-editable while the edit window is open
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(32), nullable=False)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    delivery_address: Mapped[str] = mapped_column(Text, nullable=False)

    # Computed from the items at checkout, never recomputed
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    # pending | paid | shipped | delivered | cancelled

    # NULL only for orders placed before the edit window existed
    order_deadline: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    # One-way false -> true, flipped by the deadline warning scan
    deadline_warning_sent: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false",
    )

    items: Mapped[List["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.product_name",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"Order(id={self.id!r}, code={self.order_code!r}, "
            f"status={self.status!r}, deadline={self.order_deadline!r})"
        )


class OrderItem(Base):
    """Snapshot of one cart line at checkout time."""

    __tablename__ = "order_items"
    __table_args__ = (
        Index("ix_order_items_order_id", "order_id"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
    )

    product_name: Mapped[str] = mapped_column(Text, nullable=False)
    product_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    order: Mapped["Order"] = relationship("Order", back_populates="items")

    def __repr__(self) -> str:
        return f"OrderItem(product={self.product_name!r}, qty={self.quantity})"
