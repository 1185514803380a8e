from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from apps.core.domain.money import ZERO, round_money, to_decimal
from apps.coupons.domain.errors import CouponError


class CouponReason(StrEnum):
    INVALID = "invalid"
    NOT_STARTED = "not_started"
    EXPIRED = "expired"
    MINIMUM_NOT_MET = "minimum_not_met"
    USAGE_LIMIT = "usage_limit"
    CUSTOMER_LIMIT = "customer_limit"


class CouponType(StrEnum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_SHIPPING = "free_shipping"


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def ensure_window(*, starts_at: datetime | None, expires_at: datetime | None, now: datetime) -> None:
    if starts_at is not None and now < starts_at:
        raise CouponError(CouponReason.NOT_STARTED, "Coupon is not yet active")
    if expires_at is not None and now > expires_at:
        raise CouponError(CouponReason.EXPIRED, "Coupon has expired")


def ensure_minimum(*, subtotal: Decimal, minimum_order_amount: Decimal | None) -> None:
    minimum = to_decimal(minimum_order_amount)
    if subtotal < minimum:
        raise CouponError(
            CouponReason.MINIMUM_NOT_MET,
            f"Minimum order amount of {round_money(minimum)} required for this coupon",
        )


def ensure_usage_limit(*, used_count: int, usage_limit: int | None) -> None:
    if usage_limit is not None and used_count >= usage_limit:
        raise CouponError(CouponReason.USAGE_LIMIT, "Coupon usage limit reached")


def ensure_customer_limit(*, customer_uses: int, usage_limit_per_customer: int | None) -> None:
    if usage_limit_per_customer is not None and customer_uses >= usage_limit_per_customer:
        raise CouponError(CouponReason.CUSTOMER_LIMIT, "You have reached the usage limit for this coupon")


def compute_discount(
    *,
    coupon_type: str,
    discount_value,
    subtotal,
    maximum_discount_amount=None,
    shipping_cost=ZERO,
) -> Decimal:
    subtotal = to_decimal(subtotal)
    value = to_decimal(discount_value)

    if coupon_type == CouponType.PERCENTAGE:
        discount = subtotal * value / Decimal("100")
        if maximum_discount_amount is not None and discount > to_decimal(maximum_discount_amount):
            discount = to_decimal(maximum_discount_amount)
    elif coupon_type == CouponType.FIXED_AMOUNT:
        discount = min(value, subtotal)
    elif coupon_type == CouponType.FREE_SHIPPING:
        discount = to_decimal(shipping_cost)
    else:
        raise ValueError(f"Unknown coupon type: {coupon_type}")

    return round_money(max(discount, ZERO))
