from django.contrib import admin

from .models import Coupon, CouponUsage


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "type", "discount_value", "used_count", "usage_limit", "is_active", "expires_at")
    list_filter = ("type", "is_active")
    search_fields = ("code", "name", "description")
    readonly_fields = ("used_count", "created_at", "updated_at")


@admin.register(CouponUsage)
class CouponUsageAdmin(admin.ModelAdmin):
    list_display = ("id", "coupon", "user", "order", "discount_amount", "used_at")
    list_select_related = ("coupon", "user", "order")
    search_fields = ("coupon__code", "user__email")

    def has_change_permission(self, request, obj=None):
        return False
