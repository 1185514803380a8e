from django.urls import path

from .views import CartAPI, CartApplyCouponAPI, CartCalculateAPI, CartItemDetailAPI, CartItemsAPI

urlpatterns = [
    path("cart/", CartAPI.as_view(), name="api_cart"),
    path("cart/items/", CartItemsAPI.as_view(), name="api_cart_items"),
    path("cart/items/<int:item_id>/", CartItemDetailAPI.as_view(), name="api_cart_item_detail"),
    path("cart/apply-coupon/", CartApplyCouponAPI.as_view(), name="api_cart_apply_coupon"),
    path("cart/calculate/", CartCalculateAPI.as_view(), name="api_cart_calculate"),
]
