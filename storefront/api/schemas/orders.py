"""Pydantic v2 schemas for the shop, admin and jobs APIs."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class OrderItemResponse(BaseModel):
    product_name: str
    product_price: Decimal
    quantity: int
    subtotal: Decimal

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    id: UUID
    order_code: str
    status: str
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    delivery_address: str
    total_amount: Decimal
    order_deadline: Optional[datetime] = None
    deadline_warning_sent: bool = False
    items: List[OrderItemResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TrackedOrderResponse(BaseModel):
    """Public tracking view: no email, no internal flags."""

    id: UUID
    order_code: str
    status: str
    customer_name: str
    customer_phone: str
    delivery_address: str
    total_amount: Decimal
    order_deadline: Optional[datetime] = None
    items: List[OrderItemResponse] = []
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CartLineRequest(BaseModel):
    product_name: str = Field(..., min_length=1, max_length=255)
    product_price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1, le=1000)


class CheckoutRequest(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_phone: str = Field(..., min_length=1, max_length=32)
    customer_email: Optional[str] = Field(default=None, max_length=255)
    delivery_address: str = Field(..., min_length=1)
    items: List[CartLineRequest] = Field(..., min_length=1)


class OrderEditRequest(BaseModel):
    """Customer edit. Unknown keys are accepted here and rejected by the edit gate."""

    customer_name: Optional[str] = Field(default=None, max_length=255)
    customer_phone: Optional[str] = Field(default=None, max_length=32)
    delivery_address: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class OrderStatusUpdate(BaseModel):
    status: str


class DeadlineStateResponse(BaseModel):
    order_id: UUID
    order_deadline: Optional[datetime] = None
    remaining_ms: int
    editable: bool
    expired: bool
    label: str


class ScanResultResponse(BaseModel):
    processed: int
    skipped: int
    errors: List[str] = []
