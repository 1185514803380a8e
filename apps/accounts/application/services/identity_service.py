from __future__ import annotations

from django.contrib.auth import get_user_model

from apps.accounts.domain.errors import AccountNotFoundError, AccountValidationError
from apps.accounts.domain.permissions import Role
from apps.accounts.domain.policies import normalize_email
from apps.accounts.models import AccountProfile


class AccountIdentityService:
    @staticmethod
    def resolve_user_by_email(*, email: str):
        raw = normalize_email(email)
        if not raw:
            raise AccountValidationError("Email is required.", field="email")

        user = get_user_model().objects.filter(email__iexact=raw).first()
        if not user:
            raise AccountNotFoundError("Account not found.")
        return user

    @staticmethod
    def role_for(user) -> str | None:
        """Superusers always act as admins; everyone else takes the profile role."""
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        if getattr(user, "is_superuser", False):
            return Role.ADMIN.value
        profile = AccountProfile.objects.filter(user_id=user.pk).only("role").first()
        if profile is None:
            return Role.CUSTOMER.value
        return profile.role

    @staticmethod
    def display_name(user) -> str:
        if user is None:
            return ""
        profile = AccountProfile.objects.filter(user_id=user.pk).only("full_name").first()
        if profile and profile.full_name:
            return profile.full_name
        full = f"{getattr(user, 'first_name', '')} {getattr(user, 'last_name', '')}".strip()
        return full or getattr(user, "email", "") or getattr(user, "username", "")
