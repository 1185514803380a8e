from django.contrib import admin

from .models import CartItem


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "session_id", "product", "variation", "quantity", "price", "updated_at")
    list_select_related = ("user", "product", "variation")
    search_fields = ("session_id", "user__email", "product__name")
