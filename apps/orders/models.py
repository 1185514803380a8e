from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models

from apps.orders.domain.status import OrderStatus, PaymentStatus


class Order(models.Model):
    STATUS_CHOICES = [(status.value, status.value.title()) for status in OrderStatus]
    PAYMENT_STATUS_CHOICES = [(status.value, status.value.title()) for status in PaymentStatus]

    DELIVERY_STANDARD = "standard"
    DELIVERY_EXPRESS = "express"
    DELIVERY_PICKUP = "pickup"
    DELIVERY_CHOICES = [
        (DELIVERY_STANDARD, "Standard"),
        (DELIVERY_EXPRESS, "Express"),
        (DELIVERY_PICKUP, "Pickup"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=32, unique=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="orders")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=OrderStatus.PENDING.value)
    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PaymentStatus.PENDING.value
    )
    payment_method = models.CharField(max_length=50, blank=True, default="")
    delivery_type = models.CharField(max_length=20, choices=DELIVERY_CHOICES, default=DELIVERY_STANDARD)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    shipping_cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    shipping_address = models.JSONField(default=dict, blank=True)
    coupon = models.ForeignKey(
        "coupons.Coupon", on_delete=models.SET_NULL, null=True, blank=True, related_name="orders"
    )
    coupon_code = models.CharField(max_length=50, blank=True, default="")
    tracking_number = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="orders_user_created_idx"),
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["payment_status"], name="orders_payment_status_idx"),
        ]

    def __str__(self) -> str:
        return self.order_number


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey("catalog.Product", on_delete=models.PROTECT, related_name="order_items")
    variation = models.ForeignKey(
        "catalog.ProductVariation",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    product_name = models.CharField(max_length=255)
    variation_name = models.CharField(max_length=255, blank=True, default="")
    quantity = models.PositiveIntegerField()
    # Price the customer saw in the cart, not necessarily the catalog price at checkout.
    price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.order} - {self.product_name} x{self.quantity}"

    @property
    def line_total(self):
        return self.price * self.quantity


class OrderStatusHistory(models.Model):
    """Append-only: rows are inserted on every transition and never edited."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="status_history")
    status = models.CharField(max_length=20, choices=Order.STATUS_CHOICES)
    notes = models.TextField(blank=True, default="")
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_status_changes",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name_plural = "order status history"

    def __str__(self) -> str:
        return f"{self.order} -> {self.status}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ValueError("Order status history rows are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Order status history rows are append-only")
