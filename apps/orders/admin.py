from django.contrib import admin

from .models import Order, OrderItem, OrderStatusHistory


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "variation", "product_name", "variation_name", "quantity", "price")
    can_delete = False


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ("status", "notes", "changed_by", "created_at")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "user", "status", "payment_status", "total_amount", "created_at")
    list_filter = ("status", "payment_status", "delivery_type")
    search_fields = ("order_number", "user__email", "coupon_code")
    list_select_related = ("user",)
    readonly_fields = (
        "order_number",
        "subtotal",
        "tax_amount",
        "shipping_cost",
        "discount_amount",
        "total_amount",
        "coupon",
        "coupon_code",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline, OrderStatusHistoryInline]
