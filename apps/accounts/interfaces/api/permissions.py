from __future__ import annotations

from rest_framework.permissions import BasePermission

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.permissions import Permission, has_any_permission
from apps.core.domain.errors import AccessDeniedError


def require_permission(*permissions: Permission) -> type[BasePermission]:
    """Build a DRF permission class granting access when the role holds any of `permissions`.

    Anonymous requests fail `has_permission` without a message so DRF answers 401
    through the authenticator's challenge header.
    """

    required = tuple(permissions)

    class _RequirePermission(BasePermission):
        message = AccessDeniedError.default_message

        def has_permission(self, request, view) -> bool:
            user = getattr(request, "user", None)
            if user is None or not user.is_authenticated:
                return False
            role = AccountIdentityService.role_for(user)
            request.store_role = role
            return has_any_permission(role, required)

    _RequirePermission.__name__ = "Require_" + "_or_".join(p.name for p in required)
    return _RequirePermission


class MethodPermissionMixin:
    """Per-HTTP-method permission table for admin views.

    `method_permissions = {"GET": (Permission.VIEW_X,), "POST": (Permission.CREATE_X,)}`
    """

    method_permissions: dict[str, tuple[Permission, ...]] = {}

    def get_permissions(self):
        required = self.method_permissions.get(self.request.method)
        if required is None and self.request.method == "HEAD":
            required = self.method_permissions.get("GET")
        if required is None:
            return super().get_permissions()
        return [require_permission(*required)()]
