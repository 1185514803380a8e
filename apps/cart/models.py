from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q


class CartItem(models.Model):
    """A cart line owned by either a signed-in user or a guest session, never both."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, null=True, blank=True, related_name="cart_items"
    )
    session_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    product = models.ForeignKey("catalog.Product", on_delete=models.CASCADE, related_name="cart_items")
    variation = models.ForeignKey(
        "catalog.ProductVariation", on_delete=models.CASCADE, null=True, blank=True, related_name="cart_items"
    )
    quantity = models.PositiveIntegerField(default=1)
    attributes = models.JSONField(default=dict, blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=(Q(user__isnull=False) & Q(session_id=""))
                | (Q(user__isnull=True) & ~Q(session_id="")),
                name="cart_item_single_owner",
            ),
        ]

    def __str__(self) -> str:
        owner = f"user={self.user_id}" if self.user_id else f"session={self.session_id}"
        return f"{owner} {self.product_id} x{self.quantity}"

    @property
    def line_total(self):
        return self.price * self.quantity
