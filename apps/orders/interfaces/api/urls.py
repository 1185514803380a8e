from django.urls import path

from .views import (
    AdminOrderBulkStatusAPI,
    AdminOrderDetailAPI,
    AdminOrderHistoryAPI,
    AdminOrderListAPI,
    AdminOrderStatusAPI,
    OrderCancelAPI,
    OrderDetailAPI,
    OrderListCreateAPI,
)

urlpatterns = [
    path("orders/", OrderListCreateAPI.as_view(), name="api_orders"),
    path("orders/<uuid:order_id>/", OrderDetailAPI.as_view(), name="api_order_detail"),
    path("orders/<uuid:order_id>/cancel/", OrderCancelAPI.as_view(), name="api_order_cancel"),
    path("admin/orders/", AdminOrderListAPI.as_view(), name="api_admin_orders"),
    path("admin/orders/bulk-status/", AdminOrderBulkStatusAPI.as_view(), name="api_admin_orders_bulk_status"),
    path("admin/orders/<uuid:order_id>/", AdminOrderDetailAPI.as_view(), name="api_admin_order_detail"),
    path("admin/orders/<uuid:order_id>/status/", AdminOrderStatusAPI.as_view(), name="api_admin_order_status"),
    path("admin/orders/<uuid:order_id>/history/", AdminOrderHistoryAPI.as_view(), name="api_admin_order_history"),
]
