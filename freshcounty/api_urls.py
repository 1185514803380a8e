"""
API URL aggregation.

Aggregates app API routes under `/api/`.
"""

from django.urls import include, path

urlpatterns = [
    path("", include("apps.accounts.interfaces.api.urls")),
    path("", include("apps.system.interfaces.api.urls")),
    path("", include("apps.catalog.interfaces.api.urls")),
    path("", include("apps.cart.interfaces.api.urls")),
    path("", include("apps.coupons.interfaces.api.urls")),
    path("", include("apps.orders.interfaces.api.urls")),
    path("", include("apps.dashboard.interfaces.api.urls")),
]
