from __future__ import annotations

import logging
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, Q, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from apps.core.domain.money import ZERO, round_money
from apps.coupons.domain.errors import (
    CouponCodeTakenError,
    CouponInUseError,
    CouponNotFoundError,
    CouponValidationError,
)
from apps.coupons.domain.policies import CouponType, normalize_code
from apps.coupons.models import Coupon, CouponUsage

logger = logging.getLogger("freshcounty.coupons")

EDITABLE_FIELDS = (
    "code",
    "name",
    "description",
    "type",
    "discount_value",
    "minimum_order_amount",
    "maximum_discount_amount",
    "usage_limit",
    "usage_limit_per_customer",
    "starts_at",
    "expires_at",
    "is_active",
)


def _check_rules(values: dict) -> None:
    starts_at = values.get("starts_at")
    expires_at = values.get("expires_at")
    if starts_at and expires_at and starts_at >= expires_at:
        raise CouponValidationError("Expiry date must be after start date", field="expires_at")
    if values.get("type") == CouponType.PERCENTAGE and values.get("discount_value", ZERO) > 100:
        raise CouponValidationError("Percentage discount cannot exceed 100", field="discount_value")
    if values.get("type") != CouponType.FREE_SHIPPING and values.get("discount_value", ZERO) <= 0:
        raise CouponValidationError("Discount value must be positive", field="discount_value")


def get_coupon(coupon_id) -> Coupon:
    coupon = Coupon.objects.select_related("created_by").filter(pk=coupon_id).first()
    if coupon is None:
        raise CouponNotFoundError()
    return coupon


class CouponAdminService:
    @staticmethod
    @transaction.atomic
    def create(*, values: dict, created_by=None) -> Coupon:
        values = dict(values)
        values["code"] = normalize_code(values.get("code"))
        if not values["code"]:
            raise CouponValidationError("Coupon code is required", field="code")
        _check_rules(values)
        if Coupon.objects.filter(code=values["code"]).exists():
            raise CouponCodeTakenError(field="code")
        try:
            coupon = Coupon.objects.create(created_by=created_by, **values)
        except IntegrityError as exc:
            raise CouponCodeTakenError(field="code") from exc
        logger.info("coupon created code=%s", coupon.code)
        return coupon

    @staticmethod
    @transaction.atomic
    def update(*, coupon: Coupon, changes: dict) -> Coupon:
        coupon = Coupon.objects.select_for_update().get(pk=coupon.pk)
        if "code" in changes:
            changes = {**changes, "code": normalize_code(changes["code"])}
            if Coupon.objects.filter(code=changes["code"]).exclude(pk=coupon.pk).exists():
                raise CouponCodeTakenError(field="code")

        merged = {name: getattr(coupon, name) for name in EDITABLE_FIELDS}
        merged.update(changes)
        _check_rules(merged)

        fields = [name for name in EDITABLE_FIELDS if name in changes]
        for name in fields:
            setattr(coupon, name, changes[name])
        if fields:
            coupon.save(update_fields=[*fields, "updated_at"])
        logger.info("coupon updated code=%s fields=%s", coupon.code, fields)
        return coupon

    @staticmethod
    @transaction.atomic
    def delete(*, coupon: Coupon) -> None:
        coupon = Coupon.objects.select_for_update().get(pk=coupon.pk)
        if coupon.used_count > 0:
            raise CouponInUseError()
        code = coupon.code
        coupon.delete()
        logger.info("coupon deleted code=%s", code)

    @staticmethod
    def usage_stats(coupon: Coupon) -> dict:
        aggregate = CouponUsage.objects.filter(coupon=coupon).aggregate(
            total_uses=Count("id"),
            unique_users=Count("user", distinct=True),
            total_discount_given=Sum("discount_amount"),
        )
        return {
            "total_uses": aggregate["total_uses"] or 0,
            "unique_users": aggregate["unique_users"] or 0,
            "total_discount_given": round_money(aggregate["total_discount_given"] or ZERO),
        }

    @staticmethod
    def period_stats(*, days: int = 30) -> dict:
        now = timezone.now()
        since = now - timedelta(days=days)

        overall = Coupon.objects.aggregate(
            total_coupons=Count("id"),
            active_coupons=Count("id", filter=Q(is_active=True)),
            expired_coupons=Count("id", filter=Q(expires_at__lt=now)),
            total_uses=Sum("used_count"),
        )
        recent_usages = CouponUsage.objects.filter(used_at__gte=since)
        recent = recent_usages.aggregate(
            recent_uses=Count("id"),
            unique_users=Count("user", distinct=True),
            total_discount_given=Sum("discount_amount"),
            avg_discount_amount=Avg("discount_amount"),
        )

        top_coupons = (
            recent_usages.values("coupon__code", "coupon__name", "coupon__type", "coupon__discount_value")
            .annotate(usage_count=Count("id"), total_discount=Sum("discount_amount"))
            .order_by("-usage_count", "coupon__code")[:10]
        )
        daily_usage = (
            recent_usages.annotate(date=TruncDate("used_at"))
            .values("date")
            .annotate(
                usage_count=Count("id"),
                total_discount=Sum("discount_amount"),
                unique_users=Count("user", distinct=True),
            )
            .order_by("date")
        )

        return {
            "overview": {
                "total_coupons": overall["total_coupons"] or 0,
                "active_coupons": overall["active_coupons"] or 0,
                "expired_coupons": overall["expired_coupons"] or 0,
                "total_uses": overall["total_uses"] or 0,
                "recent_uses": recent["recent_uses"] or 0,
                "unique_users": recent["unique_users"] or 0,
                "total_discount_given": round_money(recent["total_discount_given"] or ZERO),
                "avg_discount_amount": round_money(recent["avg_discount_amount"] or ZERO),
            },
            "top_coupons": [
                {
                    "code": row["coupon__code"],
                    "name": row["coupon__name"],
                    "type": row["coupon__type"],
                    "discount_value": row["coupon__discount_value"],
                    "usage_count": row["usage_count"],
                    "total_discount": round_money(row["total_discount"] or ZERO),
                }
                for row in top_coupons
            ],
            "daily_usage": [
                {
                    "date": row["date"].isoformat() if row["date"] else None,
                    "usage_count": row["usage_count"],
                    "total_discount": round_money(row["total_discount"] or ZERO),
                    "unique_users": row["unique_users"],
                }
                for row in daily_usage
            ],
        }
