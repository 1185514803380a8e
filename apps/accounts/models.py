from __future__ import annotations

from django.conf import settings
from django.db import models


class AccountProfile(models.Model):
    ROLE_CUSTOMER = "customer"
    ROLE_STAFF = "staff"
    ROLE_MANAGER = "manager"
    ROLE_ADMIN = "admin"

    ROLE_CHOICES = [
        (ROLE_CUSTOMER, "Customer"),
        (ROLE_STAFF, "Staff"),
        (ROLE_MANAGER, "Manager"),
        (ROLE_ADMIN, "Admin"),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="account_profile",
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CUSTOMER, db_index=True)
    full_name = models.CharField(max_length=200, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"AccountProfile(user_id={self.user_id}, role={self.role})"


class AccountAuditLog(models.Model):
    ACTION_REGISTERED = "registered"
    ACTION_LOGIN_SUCCEEDED = "login_succeeded"
    ACTION_LOGIN_FAILED = "login_failed"
    ACTION_PASSWORD_RESET_REQUESTED = "password_reset_requested"
    ACTION_PASSWORD_RESET_COMPLETED = "password_reset_completed"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="account_audit_logs",
    )
    action = models.CharField(max_length=64)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default="")
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["action", "created_at"], name="accounts_ac_action_6d1f0b_idx"),
            models.Index(fields=["user", "created_at"], name="accounts_ac_user_id_4b2c9e_idx"),
        ]

    def __str__(self) -> str:
        return f"AccountAuditLog(action={self.action}, user_id={self.user_id})"
