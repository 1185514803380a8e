"""
URL configuration for freshcounty project.

The JSON API lives under `/api/`; health probes sit at the root so load
balancers can reach them without authentication.
"""

from django.contrib import admin
from django.urls import include, path

from apps.observability.views import healthz, readyz

handler404 = "freshcounty.error_views.handle_404"
handler500 = "freshcounty.error_views.handle_500"

urlpatterns = [
    path("healthz", healthz, name="healthz"),
    path("readyz", readyz, name="readyz"),
    path("admin/", admin.site.urls),
    path("api/", include("freshcounty.api_urls")),
]
