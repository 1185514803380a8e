from __future__ import annotations

import logging

from django.db.models import F

from apps.coupons.models import Coupon, CouponUsage

logger = logging.getLogger("freshcounty.coupons")


class CouponUsageRecorder:
    """Only called from inside the order transaction, once per order."""

    @staticmethod
    def record(*, coupon: Coupon, user, order, discount) -> CouponUsage:
        usage = CouponUsage.objects.create(coupon=coupon, user=user, order=order, discount_amount=discount)
        Coupon.objects.filter(pk=coupon.pk).update(used_count=F("used_count") + 1)
        logger.info("coupon redeemed code=%s order=%s discount=%s", coupon.code, order.order_number, discount)
        return usage
