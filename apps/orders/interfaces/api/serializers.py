from __future__ import annotations

from rest_framework import serializers

from apps.orders.domain.status import OrderStatus
from apps.orders.models import Order, OrderItem

STATUS_CHOICES = [status.value for status in OrderStatus]


class OrderLineSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    variation_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    variation_name = serializers.CharField(required=False, allow_blank=True, default="")
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)


class ShippingAddressSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default="")
    address = serializers.CharField(max_length=500)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    country = serializers.CharField(max_length=100, required=False, allow_blank=True, default="Nigeria")
    zip_code = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")


class CreateOrderSerializer(serializers.Serializer):
    items = OrderLineSerializer(many=True, allow_empty=False)
    shipping_address = ShippingAddressSerializer()
    payment_method = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    coupon_code = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    delivery_type = serializers.ChoiceField(
        choices=[choice for choice, _ in Order.DELIVERY_CHOICES], required=False, default=Order.DELIVERY_STANDARD
    )
    delivery_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True, default=None
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class UpdateStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    tracking_number = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    notify_customer = serializers.BooleanField(required=False, default=True)


class BulkStatusSerializer(serializers.Serializer):
    order_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "variation_id",
            "product_name",
            "variation_name",
            "quantity",
            "price",
            "line_total",
        ]


class OrderSerializer(serializers.ModelSerializer):
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "payment_status",
            "payment_method",
            "delivery_type",
            "subtotal",
            "tax_amount",
            "shipping_cost",
            "discount_amount",
            "total_amount",
            "coupon_code",
            "tracking_number",
            "item_count",
            "created_at",
            "updated_at",
        ]

    def get_item_count(self, obj) -> int:
        annotated = getattr(obj, "item_count", None)
        if annotated is not None:
            return annotated
        return obj.items.count()


class OrderDetailSerializer(OrderSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["shipping_address", "notes", "items"]


class AdminOrderSerializer(OrderSerializer):
    customer_email = serializers.EmailField(source="user.email", read_only=True)
    customer_name = serializers.SerializerMethodField()

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["customer_email", "customer_name"]

    def get_customer_name(self, obj) -> str:
        address = obj.shipping_address or {}
        name = f"{address.get('first_name', '')} {address.get('last_name', '')}".strip()
        return name or f"{obj.user.first_name} {obj.user.last_name}".strip() or obj.user.email
