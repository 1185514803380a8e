from __future__ import annotations

from datetime import timedelta

from django.utils import timezone

from apps.core.domain.money import format_money
from apps.system.application.services.store_settings_service import StoreSettingsService

STATUS_DISPLAY = {
    "pending": "Pending",
    "confirmed": "Confirmed",
    "processing": "Processing",
    "shipped": "Shipped",
    "delivered": "Delivered",
    "cancelled": "Cancelled",
}


def customer_name_for(order) -> str:
    address = order.shipping_address or {}
    name = f"{address.get('first_name', '')} {address.get('last_name', '')}".strip()
    if name:
        return name
    user = order.user
    full = f"{user.first_name} {user.last_name}".strip()
    return full or user.email


def build_order_email_data(order, status: str, *, tracking_number: str | None = None, currency_symbol: str | None = None) -> dict:
    """Template context shared by every order email."""
    symbol = currency_symbol or StoreSettingsService.load().currency_symbol
    address = order.shipping_address or {}
    customer_name = customer_name_for(order)

    items = [
        {
            "name": item.product_name,
            "variation": item.variation_name,
            "quantity": item.quantity,
            "price": format_money(item.price, symbol),
            "total": format_money(item.price * item.quantity, symbol),
        }
        for item in order.items.all()
    ]

    estimated_delivery = None
    if status == "shipped":
        estimated_delivery = (timezone.localdate() + timedelta(days=1)).strftime("%B %d, %Y")

    return {
        "customer_name": customer_name,
        "order_number": order.order_number,
        "order_date": timezone.localtime(order.created_at).strftime("%B %d, %Y"),
        "order_total": format_money(order.total_amount, symbol),
        "order_status": status,
        "order_status_display": STATUS_DISPLAY.get(status, status),
        "items": items,
        "shipping_address": {
            "name": address.get("name") or customer_name,
            "street": address.get("address") or address.get("street", ""),
            "city": address.get("city", ""),
            "state": address.get("state", ""),
            "country": address.get("country") or "Nigeria",
            "zip_code": address.get("zip_code", ""),
        },
        "subtotal": format_money(order.subtotal, symbol),
        "tax_amount": format_money(order.tax_amount, symbol),
        "shipping_cost": format_money(order.shipping_cost, symbol),
        "discount": format_money(order.discount_amount, symbol) if order.discount_amount else None,
        "tracking_number": tracking_number or order.tracking_number or None,
        "estimated_delivery": estimated_delivery,
    }
