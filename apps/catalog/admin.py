from django.contrib import admin

from .models import Category, Product, ProductVariation, ProductVariationCombination, VariationOption, VariationType


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug", "parent", "is_active", "sort_order")
    list_filter = ("is_active",)
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}


class ProductVariationInline(admin.TabularInline):
    model = ProductVariation
    extra = 0
    fields = ("sku", "price", "sale_price", "stock_quantity", "is_default", "is_active")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "sku", "price", "sale_price", "stock_quantity", "status", "featured", "category")
    list_filter = ("status", "featured", "category")
    search_fields = ("name", "sku", "slug")
    list_select_related = ("category",)
    inlines = [ProductVariationInline]


class VariationOptionInline(admin.TabularInline):
    model = VariationOption
    extra = 0


@admin.register(VariationType)
class VariationTypeAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "display_name", "sort_order", "is_active")
    inlines = [VariationOptionInline]


@admin.register(ProductVariationCombination)
class ProductVariationCombinationAdmin(admin.ModelAdmin):
    list_display = ("id", "variation", "option")
    list_select_related = ("variation", "option")
