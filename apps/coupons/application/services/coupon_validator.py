from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from django.utils import timezone

from apps.core.domain.money import ZERO, to_decimal
from apps.coupons.domain.errors import CouponError
from apps.coupons.domain.policies import (
    CouponReason,
    compute_discount,
    ensure_customer_limit,
    ensure_minimum,
    ensure_usage_limit,
    ensure_window,
    normalize_code,
)
from apps.coupons.models import Coupon, CouponUsage

logger = logging.getLogger("freshcounty.coupons")


@dataclass(frozen=True)
class CouponDiscount:
    coupon: Coupon
    discount_amount: Decimal


class CouponValidator:
    """Applies the coupon checks in order; the first failing check wins. Never records usage."""

    @staticmethod
    def validate(
        code: str,
        subtotal,
        user_id,
        shipping_cost=ZERO,
        now: datetime | None = None,
        *,
        for_update: bool = False,
    ) -> CouponDiscount:
        normalized = normalize_code(code)
        queryset = Coupon.objects.filter(code=normalized, is_active=True)
        if for_update:
            queryset = queryset.select_for_update()
        coupon = queryset.first() if normalized else None
        if coupon is None:
            raise CouponError(CouponReason.INVALID, "Invalid or inactive coupon code")

        now = now or timezone.now()
        subtotal = to_decimal(subtotal)

        ensure_window(starts_at=coupon.starts_at, expires_at=coupon.expires_at, now=now)
        ensure_minimum(subtotal=subtotal, minimum_order_amount=coupon.minimum_order_amount)
        ensure_usage_limit(used_count=coupon.used_count, usage_limit=coupon.usage_limit)
        if coupon.usage_limit_per_customer is not None:
            customer_uses = CouponUsage.objects.filter(coupon=coupon, user_id=user_id).count() if user_id else 0
            ensure_customer_limit(
                customer_uses=customer_uses,
                usage_limit_per_customer=coupon.usage_limit_per_customer,
            )

        discount = compute_discount(
            coupon_type=coupon.type,
            discount_value=coupon.discount_value,
            subtotal=subtotal,
            maximum_discount_amount=coupon.maximum_discount_amount,
            shipping_cost=shipping_cost,
        )
        logger.debug("coupon validated code=%s discount=%s", coupon.code, discount)
        return CouponDiscount(coupon=coupon, discount_amount=discount)
