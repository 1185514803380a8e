from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

LOW_STOCK_THRESHOLD = 5


class StockStatus(StrEnum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


def derive_stock_status(quantity: int | None) -> StockStatus:
    quantity = quantity or 0
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= LOW_STOCK_THRESHOLD:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def effective_price(price: Decimal | None, sale_price: Decimal | None) -> Decimal | None:
    """A positive sale price wins over the list price."""
    if sale_price is not None and sale_price > 0:
        return sale_price
    return price
