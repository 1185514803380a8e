from django.urls import path

from .views import AdminSettingsAPI, PublicSettingsAPI

urlpatterns = [
    path("settings/public/", PublicSettingsAPI.as_view(), name="api_public_settings"),
    path("admin/settings/", AdminSettingsAPI.as_view(), name="api_admin_settings"),
]
