from __future__ import annotations

from rest_framework import serializers

from apps.catalog.models import Category, Product, ProductVariation, VariationOption, VariationType


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "parent_id", "sort_order"]


class VariationOptionSerializer(serializers.ModelSerializer):
    variation_type = serializers.CharField(source="variation_type.name", read_only=True)

    class Meta:
        model = VariationOption
        fields = ["id", "variation_type_id", "variation_type", "name", "display_name", "color_hex", "sort_order"]


class VariationTypeSerializer(serializers.ModelSerializer):
    options = VariationOptionSerializer(many=True, read_only=True)

    class Meta:
        model = VariationType
        fields = ["id", "name", "display_name", "sort_order", "is_active", "options"]


class ProductVariationSerializer(serializers.ModelSerializer):
    effective_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    stock_status = serializers.CharField(read_only=True)
    display_name = serializers.CharField(read_only=True)
    options = VariationOptionSerializer(many=True, read_only=True)

    class Meta:
        model = ProductVariation
        fields = [
            "id",
            "sku",
            "price",
            "sale_price",
            "effective_price",
            "stock_quantity",
            "stock_status",
            "is_default",
            "display_name",
            "options",
        ]


class ProductSerializer(serializers.ModelSerializer):
    effective_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    stock_status = serializers.CharField(read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "sku",
            "short_description",
            "price",
            "sale_price",
            "effective_price",
            "stock_quantity",
            "stock_status",
            "manage_stock",
            "status",
            "featured",
            "category_id",
            "category_name",
            "created_at",
            "updated_at",
        ]


class ProductDetailSerializer(ProductSerializer):
    variations = serializers.SerializerMethodField()

    class Meta(ProductSerializer.Meta):
        fields = [*ProductSerializer.Meta.fields, "description", "variations"]

    def get_variations(self, obj):
        variations = obj.variations.filter(is_active=True).prefetch_related("options__variation_type")
        return ProductVariationSerializer(variations, many=True).data


class VariationInputSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False)
    option_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    sale_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    stock_quantity = serializers.IntegerField(required=False, default=0, min_value=0)
    is_default = serializers.BooleanField(required=False, default=False)
    is_active = serializers.BooleanField(required=False, default=True)
    sku = serializers.CharField(max_length=96, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs.get("id") is None and not attrs.get("option_ids"):
            raise serializers.ValidationError({"option_ids": "At least one option is required for a new variation."})
        return attrs


class ProductWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    sku = serializers.CharField(max_length=64, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    short_description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    sale_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    stock_quantity = serializers.IntegerField(required=False, min_value=0)
    manage_stock = serializers.BooleanField(required=False)
    status = serializers.ChoiceField(choices=[c[0] for c in Product.STATUS_CHOICES], required=False)
    featured = serializers.BooleanField(required=False)
    category_id = serializers.IntegerField(required=False, allow_null=True)
    variations = VariationInputSerializer(many=True, required=False)


class VariationTypeWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    sort_order = serializers.IntegerField(required=False, default=0)


class VariationOptionWriteSerializer(serializers.Serializer):
    variation_type_id = serializers.IntegerField()
    name = serializers.CharField(max_length=100)
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    color_hex = serializers.RegexField(r"^#[0-9A-Fa-f]{6}$", required=False, allow_blank=True, default="")
    sort_order = serializers.IntegerField(required=False, default=0)
