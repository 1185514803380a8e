from __future__ import annotations

from rest_framework import serializers

from apps.coupons.models import Coupon


class CouponSerializer(serializers.ModelSerializer):
    created_by_email = serializers.EmailField(source="created_by.email", read_only=True, default=None)

    class Meta:
        model = Coupon
        fields = [
            "id",
            "code",
            "name",
            "description",
            "type",
            "discount_value",
            "minimum_order_amount",
            "maximum_discount_amount",
            "usage_limit",
            "usage_limit_per_customer",
            "used_count",
            "starts_at",
            "expires_at",
            "is_active",
            "created_by_email",
            "created_at",
            "updated_at",
        ]


class CouponWriteSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    type = serializers.ChoiceField(choices=[c[0] for c in Coupon.TYPE_CHOICES])
    discount_value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    minimum_order_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    maximum_discount_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True, default=None
    )
    usage_limit = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    usage_limit_per_customer = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    starts_at = serializers.DateTimeField(required=False, allow_null=True, default=None)
    expires_at = serializers.DateTimeField(required=False, allow_null=True, default=None)
    is_active = serializers.BooleanField(required=False, default=True)


class CouponValidateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    order_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    shipping_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)
