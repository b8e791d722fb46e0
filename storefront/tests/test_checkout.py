"""Tests for checkout: order codes and draft building."""
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.core.exceptions import ValidationError
from storefront.orders.checkout import (
    CartLine,
    CustomerDetails,
    build_order_draft,
    generate_order_code,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
WINDOW = timedelta(minutes=30)
CUSTOMER = CustomerDetails(
    name=" Ada Obi ", phone="08030000000", address="12 Allen Avenue", email="ada@example.com",
)


class TestGenerateOrderCode:
    def test_format(self):
        assert re.fullmatch(r"ORD-[A-HJ-NP-Z2-9]{8}", generate_order_code())

    def test_no_ambiguous_characters(self):
        for _ in range(50):
            body = generate_order_code()[4:]
            assert not set(body) & set("01IO")


class TestCartLine:
    def test_subtotal(self):
        assert CartLine("Shea butter", Decimal("2500.50"), 3).subtotal == Decimal("7501.50")


class TestBuildOrderDraft:
    def test_totals_and_deadline(self):
        draft = build_order_draft(
            CUSTOMER,
            [CartLine("Shea butter", Decimal("2500"), 2), CartLine("Black soap", Decimal("1200.5"), 1)],
            NOW,
            WINDOW,
        )
        assert draft.order["total_amount"] == Decimal("6200.50")
        assert draft.order["order_deadline"] == NOW + WINDOW
        assert draft.order["status"] == "pending"
        assert draft.order["deadline_warning_sent"] is False
        assert draft.order["customer_name"] == "Ada Obi"
        assert "order_code" not in draft.order
        assert [i["subtotal"] for i in draft.items] == [Decimal("5000.00"), Decimal("1200.50")]

    def test_blank_email_stored_as_none(self):
        customer = CustomerDetails(name="Ada", phone="0803", address="Ikeja", email="  ")
        draft = build_order_draft(customer, [CartLine("Soap", Decimal("100"), 1)], NOW, WINDOW)
        assert draft.order["customer_email"] is None

    def test_empty_cart(self):
        with pytest.raises(ValidationError):
            build_order_draft(CUSTOMER, [], NOW, WINDOW)

    def test_zero_quantity(self):
        with pytest.raises(ValidationError) as ctx:
            build_order_draft(CUSTOMER, [CartLine("Soap", Decimal("100"), 0)], NOW, WINDOW)
        assert ctx.value.details == {"line": 0}

    def test_negative_price(self):
        with pytest.raises(ValidationError):
            build_order_draft(CUSTOMER, [CartLine("Soap", Decimal("-1"), 1)], NOW, WINDOW)

    def test_missing_address(self):
        customer = CustomerDetails(name="Ada", phone="0803", address=" ")
        with pytest.raises(ValidationError) as ctx:
            build_order_draft(customer, [CartLine("Soap", Decimal("100"), 1)], NOW, WINDOW)
        assert ctx.value.details == {"field": "delivery_address"}
