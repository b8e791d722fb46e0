"""HTML email templates for order notifications.

Customer-supplied text (names, addresses, product names) is escaped; amounts
are rendered as naira without decimals (``₦12,500``).
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from html import escape
from typing import Any, Iterable

from storefront.config.store import StoreConfig
from storefront.orders.status import OrderStatus


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


_STATUS_COLORS = {
    OrderStatus.PENDING: "#f59e0b",
    OrderStatus.PAID: "#3b82f6",
    OrderStatus.SHIPPED: "#8b5cf6",
    OrderStatus.DELIVERED: "#10b981",
    OrderStatus.CANCELLED: "#ef4444",
}

_STATUS_DESCRIPTIONS = {
    OrderStatus.PENDING: "Your order has been received and is awaiting processing.",
    OrderStatus.PAID: "Payment confirmed! Your order is being prepared.",
    OrderStatus.SHIPPED: "Great news! Your order is on its way to you.",
    OrderStatus.DELIVERED: "Your order has been delivered. Thank you for shopping with us!",
    OrderStatus.CANCELLED: "Your order has been cancelled. Contact support if you have questions.",
}


def format_currency(amount: Any) -> str:
    value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"₦{value:,}"


def _button(href: str, label: str, color: str) -> str:
    return (
        f'<div style="text-align: center; margin-top: 30px;">'
        f'<a href="{escape(href, quote=True)}" style="display: inline-block; background: {color}; '
        f'color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; '
        f'font-weight: 600;">{escape(label)}</a></div>'
    )


def _layout(title: str, accent: str, body: str, store_name: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; margin: 0; padding: 20px; background-color: #f5f5f5;">
  <div style="max-width: 600px; margin: 0 auto; background: white; border-radius: 12px; overflow: hidden;">
    <div style="background: {accent}; padding: 30px; text-align: center;">
      <h1 style="color: white; margin: 0; font-size: 24px;">{escape(title)}</h1>
    </div>
    <div style="padding: 30px;">
{body}
    </div>
    <div style="background: #f8fafc; padding: 20px; text-align: center; color: #6b7280; font-size: 14px;">
      <p style="margin: 0;">Thank you for shopping with {escape(store_name)}!</p>
    </div>
  </div>
</body>
</html>
"""


def _greeting(order: Any) -> str:
    return f'<p style="font-size: 16px; color: #374151;">Hi {escape(order.customer_name or "there")},</p>'


def _items_table(items: Iterable[Any], total: Any) -> str:
    rows = "".join(
        f'<tr><td style="padding: 12px; border-bottom: 1px solid #eee;">{escape(item.product_name)}</td>'
        f'<td style="padding: 12px; border-bottom: 1px solid #eee; text-align: center;">{item.quantity}</td>'
        f'<td style="padding: 12px; border-bottom: 1px solid #eee; text-align: right;">'
        f"{format_currency(item.subtotal)}</td></tr>"
        for item in items
    )
    return (
        '<table style="width: 100%; border-collapse: collapse;">'
        '<thead><tr style="background: #f1f5f9;"><th style="padding: 12px; text-align: left;">Item</th>'
        '<th style="padding: 12px; text-align: center;">Qty</th>'
        '<th style="padding: 12px; text-align: right;">Price</th></tr></thead>'
        f"<tbody>{rows}</tbody>"
        '<tfoot><tr><td colspan="2" style="padding: 15px 12px; font-weight: 700;">Total</td>'
        f'<td style="padding: 15px 12px; text-align: right; font-weight: 700;">{format_currency(total)}</td>'
        "</tr></tfoot></table>"
    )


def deadline_warning(order: Any, minutes_remaining: int, config: StoreConfig) -> RenderedEmail:
    unit = "Minute" if minutes_remaining == 1 else "Minutes"
    body = f"""      {_greeting(order)}
      <p style="font-size: 16px; color: #374151;">
        You have approximately <strong style="color: #f59e0b;">{minutes_remaining} {unit.lower()}</strong>
        left to make changes to your order details.
      </p>
      <div style="background: #fef3c7; border: 2px solid #f59e0b; border-radius: 8px; padding: 20px; margin: 20px 0;">
        <p style="margin: 0 0 10px 0; font-weight: 600; color: #92400e;">Order: {escape(order.order_code)}</p>
        <p style="margin: 0 0 10px 0; color: #a16207;">Total: {format_currency(order.total_amount)}</p>
        <p style="margin: 0; color: #a16207; font-size: 14px;">
          After the edit window expires, you won't be able to modify your delivery address or contact details.
        </p>
      </div>
      {_button(config.order_link(order.id), "Review Order Now", "#f59e0b")}
      <p style="font-size: 14px; color: #6b7280; margin-top: 20px; text-align: center;">
        If everything looks correct, no action is needed!
      </p>"""
    return RenderedEmail(
        subject=f"⏰ Only {minutes_remaining} {unit} Left to Edit Order {order.order_code}",
        html=_layout("⏰ Time Running Out!", "#d97706", body, config.store_name),
    )


def order_placed_admin(order: Any, config: StoreConfig) -> RenderedEmail:
    placed = order.created_at.strftime("%A, %d %B %Y %H:%M UTC") if order.created_at else "-"
    body = f"""      <div style="background: #f8fafc; border-radius: 8px; padding: 20px; margin-bottom: 20px;">
        <p style="margin: 0 0 10px 0;"><strong>Order ID:</strong> {escape(order.order_code)}</p>
        <p style="margin: 0 0 10px 0;"><strong>Customer:</strong> {escape(order.customer_name)}</p>
        <p style="margin: 0 0 10px 0;"><strong>Phone:</strong> {escape(order.customer_phone)}</p>
        <p style="margin: 0 0 10px 0;"><strong>Total:</strong> {format_currency(order.total_amount)}</p>
        <p style="margin: 0;"><strong>Date:</strong> {placed}</p>
      </div>
      {_button(config.app_url.rstrip("/") + "/admin/orders", "View in Dashboard", "#2563eb")}"""
    return RenderedEmail(
        subject=f"🛒 New Order {order.order_code} - {format_currency(order.total_amount)}",
        html=_layout("🛒 New Order Received!", "#1d4ed8", body, config.store_name),
    )


def order_placed_customer(order: Any, config: StoreConfig) -> RenderedEmail:
    body = f"""      {_greeting(order)}
      <p style="font-size: 16px; color: #374151;">Thank you for your order! We've received it and will process it shortly.</p>
      <div style="background: #f8fafc; border-radius: 8px; padding: 15px; margin: 20px 0;">
        <p style="margin: 0 0 5px 0; font-weight: 600;">Order ID: {escape(order.order_code)}</p>
        <p style="margin: 0; color: #6b7280;">Status: <span style="color: #f59e0b; font-weight: 500;">Pending</span></p>
      </div>
      <h3 style="margin: 25px 0 15px 0; color: #111827;">Order Summary</h3>
      {_items_table(order.items, order.total_amount)}
      <h3 style="margin: 25px 0 10px 0; color: #111827;">Delivery Address</h3>
      <p style="background: #f8fafc; padding: 15px; border-radius: 8px; margin: 0; color: #374151;">{escape(order.delivery_address)}</p>
      <p style="font-size: 14px; color: #6b7280;">You can update your contact and delivery details for the next {config.edit_window_minutes} minutes.</p>
      {_button(config.order_link(order.id), "View Order", "#10b981")}"""
    return RenderedEmail(
        subject=f"Order Confirmed! - {order.order_code}",
        html=_layout("✅ Order Confirmed!", "#059669", body, config.store_name),
    )


def status_update(order: Any, status: OrderStatus, config: StoreConfig) -> RenderedEmail:
    color = _STATUS_COLORS[status]
    body = f"""      {_greeting(order)}
      <div style="background: #f8fafc; border-radius: 8px; padding: 20px; margin: 20px 0; text-align: center;">
        <p style="margin: 0 0 10px 0; color: #6b7280;">Order ID: <strong>{escape(order.order_code)}</strong></p>
        <p style="margin: 0; font-size: 24px; font-weight: 700; color: {color};">{status.label}</p>
      </div>
      <p style="font-size: 16px; color: #374151; line-height: 1.6;">{_STATUS_DESCRIPTIONS[status]}</p>
      {_button(config.order_link(order.id), "View Order", color)}"""
    return RenderedEmail(
        subject=f"Order {order.order_code} - Status: {status.label}",
        html=_layout("📦 Order Update", color, body, config.store_name),
    )


def review_request(order: Any, config: StoreConfig) -> RenderedEmail:
    products = "".join(
        f'<li style="margin: 0 0 6px 0;">{escape(item.product_name)}</li>' for item in order.items
    )
    body = f"""      {_greeting(order)}
      <p style="font-size: 16px; color: #374151;">Your order {escape(order.order_code)} has arrived. How did we do?</p>
      <ul style="color: #374151;">{products}</ul>
      <p style="font-size: 16px; color: #374151;">A short review helps other shoppers and the sellers you bought from.</p>
      {_button(config.app_url.rstrip("/") + "/my-reviews", "Write a Review", "#10b981")}"""
    return RenderedEmail(
        subject=f"How was your order {order.order_code}? Leave a review",
        html=_layout("⭐ Tell Us What You Think", "#059669", body, config.store_name),
    )
