from __future__ import annotations

from rest_framework import serializers

from apps.cart.models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_slug = serializers.CharField(source="product.slug", read_only=True)
    variation_name = serializers.SerializerMethodField()
    stock_quantity = serializers.IntegerField(source="product.stock_quantity", read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "product_slug",
            "variation_id",
            "variation_name",
            "quantity",
            "price",
            "line_total",
            "attributes",
            "stock_quantity",
        ]

    def get_variation_name(self, obj) -> str:
        return obj.variation.display_name if obj.variation_id else ""


class AddCartItemSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    variation_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)
    attributes = serializers.DictField(required=False, default=dict)


class UpdateCartItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class ApplyCouponSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    delivery_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True, default=None
    )


class CalculateLineSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1, required=False)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    quantity = serializers.IntegerField(min_value=1)


class CalculateSerializer(serializers.Serializer):
    items = CalculateLineSerializer(many=True)
    delivery_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True, default=None
    )
