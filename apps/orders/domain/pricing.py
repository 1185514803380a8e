"""
Order totals.

Every monetary output is rounded to cents on its own (ROUND_HALF_UP) and the
total is the sum of the rounded parts, so a total can differ by a cent from
rounding the unrounded sum.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Protocol

from apps.core.domain.money import ZERO, round_money, to_decimal
from apps.system.domain.settings import StoreSettings


class PricedLine(Protocol):
    price: Decimal
    quantity: int


@dataclass(frozen=True)
class LineItem:
    price: Decimal
    quantity: int


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax_amount: Decimal
    tax_rate: Decimal
    shipping_cost: Decimal
    discount_amount: Decimal
    total_amount: Decimal

    def with_discount(self, discount) -> Totals:
        discount = round_money(discount)
        total = self.subtotal + self.tax_amount + self.shipping_cost - discount
        return replace(self, discount_amount=discount, total_amount=max(total, ZERO))

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "tax_amount": self.tax_amount,
            "tax_rate": self.tax_rate,
            "shipping_cost": self.shipping_cost,
            "discount_amount": self.discount_amount,
            "total_amount": self.total_amount,
        }


def _line_value(item) -> tuple[Decimal, int]:
    if isinstance(item, dict):
        return to_decimal(item.get("price")), int(item.get("quantity") or 0)
    return to_decimal(item.price), int(item.quantity)


def calculate_totals(
    items: Iterable[PricedLine | dict],
    settings: StoreSettings,
    shipping_override=None,
) -> Totals:
    """Quantities are not validated here; callers reject non-positive quantities first."""
    raw_subtotal = ZERO
    for item in items:
        price, quantity = _line_value(item)
        raw_subtotal += price * quantity

    tax_rate = to_decimal(settings.tax_rate)
    raw_tax = raw_subtotal * tax_rate / Decimal("100")

    if shipping_override is not None:
        raw_shipping = to_decimal(shipping_override)
    elif raw_subtotal >= to_decimal(settings.free_shipping_threshold):
        raw_shipping = ZERO
    else:
        raw_shipping = to_decimal(settings.shipping_cost_standard)

    subtotal = round_money(raw_subtotal)
    tax_amount = round_money(raw_tax)
    shipping_cost = round_money(raw_shipping)
    return Totals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        tax_rate=tax_rate,
        shipping_cost=shipping_cost,
        discount_amount=round_money(ZERO),
        total_amount=subtotal + tax_amount + shipping_cost,
    )
