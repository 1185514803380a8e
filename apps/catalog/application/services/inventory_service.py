from __future__ import annotations

import logging

from django.db.models import F

from apps.catalog.domain.errors import InsufficientStockError
from apps.catalog.models import Product

logger = logging.getLogger("freshcounty.catalog")


class InventoryService:
    """Stock mutations. Callers own the surrounding transaction."""

    @staticmethod
    def decrement(*, product: Product, quantity: int) -> None:
        """Conditional decrement: zero affected rows means another order took the stock first."""
        updated = Product.objects.filter(pk=product.pk, stock_quantity__gte=quantity).update(
            stock_quantity=F("stock_quantity") - quantity
        )
        if updated == 0:
            available = Product.objects.filter(pk=product.pk).values_list("stock_quantity", flat=True).first() or 0
            raise InsufficientStockError(product_name=product.name, available=available, requested=quantity)

    @staticmethod
    def restore(*, product_id: int, quantity: int) -> None:
        # Mirrors decrement: every ordered unit was taken, so every unit comes back.
        Product.objects.filter(pk=product_id).update(stock_quantity=F("stock_quantity") + quantity)
        logger.info("stock restored product_id=%s quantity=%s", product_id, quantity)
