from django.urls import path

from .views import AdminCouponDetailAPI, AdminCouponListAPI, AdminCouponStatsAPI, CouponValidateAPI

urlpatterns = [
    path("coupons/validate/", CouponValidateAPI.as_view(), name="api_coupon_validate"),
    path("admin/coupons/", AdminCouponListAPI.as_view(), name="api_admin_coupons"),
    path("admin/coupons/stats/", AdminCouponStatsAPI.as_view(), name="api_admin_coupon_stats"),
    path("admin/coupons/<int:coupon_id>/", AdminCouponDetailAPI.as_view(), name="api_admin_coupon_detail"),
]
