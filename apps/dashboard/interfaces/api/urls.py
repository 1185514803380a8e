from django.urls import path

from .views import DashboardAPI, OrderStatsAPI

urlpatterns = [
    path("admin/dashboard/", DashboardAPI.as_view(), name="api_admin_dashboard"),
    path("admin/dashboard/order-stats/", OrderStatsAPI.as_view(), name="api_admin_dashboard_order_stats"),
]
