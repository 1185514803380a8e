from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    LoginAPI,
    MeAPI,
    PasswordResetConfirmAPI,
    PasswordResetRequestAPI,
    PermissionsAPI,
    RegisterAPI,
)

urlpatterns = [
    path("auth/register/", RegisterAPI.as_view(), name="api_auth_register"),
    path("auth/login/", LoginAPI.as_view(), name="api_auth_login"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="api_auth_token_refresh"),
    path("auth/me/", MeAPI.as_view(), name="api_auth_me"),
    path("auth/permissions/", PermissionsAPI.as_view(), name="api_auth_permissions"),
    path("auth/password-reset/", PasswordResetRequestAPI.as_view(), name="api_auth_password_reset"),
    path(
        "auth/password-reset/confirm/",
        PasswordResetConfirmAPI.as_view(),
        name="api_auth_password_reset_confirm",
    ),
]
