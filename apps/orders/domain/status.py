from __future__ import annotations

from enum import StrEnum


class OrderStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

CUSTOMER_CANCELLABLE = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})

# Statuses that send the customer an email; shipped only updates the visible status.
CUSTOMER_NOTIFY_STATUSES = frozenset(
    {OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)

STATUS_DISPLAY = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.PROCESSING: "Processing",
    OrderStatus.SHIPPED: "Shipped",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}


def can_transition(current: str, new: str) -> bool:
    return OrderStatus(new) in ORDER_TRANSITIONS[OrderStatus(current)]


def is_new_order_confirmation(previous: str, new: str) -> bool:
    return new == OrderStatus.CONFIRMED and previous != OrderStatus.CONFIRMED


def admin_alert_needed(previous: str, new: str) -> bool:
    return new in (OrderStatus.CANCELLED, OrderStatus.DELIVERED) or is_new_order_confirmation(previous, new)


def admin_alert_title(previous: str, new: str) -> str:
    if is_new_order_confirmation(previous, new):
        return "New Order Received"
    return {
        OrderStatus.CANCELLED: "Order Cancelled",
        OrderStatus.DELIVERED: "Order Delivered",
        OrderStatus.SHIPPED: "Order Shipped",
    }.get(OrderStatus(new), "Order Status Updated")
