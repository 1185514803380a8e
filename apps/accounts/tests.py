from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.cache import cache
from django.test import SimpleTestCase, TestCase

from rest_framework.test import APIClient

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.errors import PhoneInvalidError
from apps.accounts.domain.permissions import (
    Permission,
    Role,
    has_all_permissions,
    has_any_permission,
    has_permission,
    permissions_for_role,
    role_info,
)
from apps.accounts.domain.policies import normalize_phone, validate_phone
from apps.accounts.models import AccountAuditLog, AccountProfile


class PermissionMatrixTests(SimpleTestCase):
    def test_admin_holds_every_permission(self):
        self.assertEqual(permissions_for_role(Role.ADMIN), frozenset(Permission))

    def test_customer_holds_none(self):
        self.assertFalse(has_permission(Role.CUSTOMER, Permission.VIEW_ORDERS))
        self.assertEqual(permissions_for_role("customer"), frozenset())

    def test_staff_can_update_orders_but_not_products(self):
        self.assertTrue(has_permission(Role.STAFF, Permission.UPDATE_ORDER_STATUS))
        self.assertFalse(has_permission(Role.STAFF, Permission.EDIT_PRODUCTS))
        self.assertTrue(has_any_permission(Role.STAFF, [Permission.EDIT_PRODUCTS, Permission.VIEW_ORDERS]))
        self.assertFalse(has_all_permissions(Role.STAFF, [Permission.EDIT_PRODUCTS, Permission.VIEW_ORDERS]))

    def test_unknown_role_has_nothing(self):
        self.assertFalse(has_permission("ghost", Permission.VIEW_DASHBOARD))

    def test_role_info_flags(self):
        info = role_info("manager")
        self.assertTrue(info["can_access_admin"])
        self.assertTrue(info["is_manager"])
        self.assertFalse(info["is_admin"])
        self.assertIn("view_orders", info["permissions"])
        self.assertFalse(role_info("customer")["can_access_admin"])


class PolicyTests(SimpleTestCase):
    def test_phone_is_optional_and_normalized(self):
        self.assertEqual(validate_phone(""), "")
        self.assertEqual(normalize_phone("00234 (801) 234-5678"), "+2348012345678")
        self.assertEqual(normalize_phone("0801 234 5678"), "+2348012345678")
        self.assertEqual(validate_phone("2348012345678"), "+2348012345678")

    def test_bad_phone_rejected(self):
        with self.assertRaises(PhoneInvalidError):
            validate_phone("call me")


class IdentityServiceTests(TestCase):
    def test_role_resolution(self):
        User = get_user_model()
        root = User.objects.create_superuser(username="root", email="root@example.com", password="pw")
        bare = User.objects.create_user(username="bare", email="bare@example.com", password="pw")
        staff = User.objects.create_user(username="staff", email="staff@example.com", password="pw")
        AccountProfile.objects.create(user=staff, role="staff", full_name="Sade Staff")

        self.assertEqual(AccountIdentityService.role_for(root), "admin")
        self.assertEqual(AccountIdentityService.role_for(bare), "customer")
        self.assertEqual(AccountIdentityService.role_for(staff), "staff")
        self.assertEqual(AccountIdentityService.display_name(staff), "Sade Staff")
        self.assertEqual(AccountIdentityService.display_name(bare), "bare@example.com")


class AuthApiTests(TestCase):
    password = "Fresh-County-2024!"

    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def _register(self, email="ada@example.com"):
        return self.client.post(
            "/api/auth/register/",
            {"full_name": "Ada Obi", "email": email, "password": self.password, "phone": "08012345678"},
            format="json",
        )

    def test_register_creates_customer_and_returns_tokens(self):
        with self.captureOnCommitCallbacks(execute=True):
            res = self._register()
        self.assertEqual(res.status_code, 201)
        data = res.data["data"]
        self.assertIn("access", data)
        self.assertIn("refresh", data)
        self.assertEqual(data["user"]["role"], "customer")

        user = get_user_model().objects.get(email="ada@example.com")
        self.assertEqual(user.account_profile.full_name, "Ada Obi")
        self.assertTrue(AccountAuditLog.objects.filter(user=user, action=AccountAuditLog.ACTION_REGISTERED).exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "Welcome to Fresh County!")

    def test_duplicate_email_conflicts(self):
        self._register()
        res = self._register(email="ADA@example.com")
        self.assertEqual(res.status_code, 409)
        self.assertFalse(res.data["success"])

    def test_weak_password_rejected(self):
        res = self.client.post(
            "/api/auth/register/",
            {"full_name": "Ada", "email": "ada@example.com", "password": "12345678"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertFalse(get_user_model().objects.filter(email="ada@example.com").exists())

    def test_login_and_me(self):
        self._register()
        res = self.client.post("/api/auth/login/", {"email": "ada@example.com", "password": self.password}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.data["data"]["role_info"]["can_access_admin"])

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['data']['access']}")
        me = self.client.get("/api/auth/me/")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.data["data"]["user"]["email"], "ada@example.com")

        perms = self.client.get("/api/auth/permissions/")
        self.assertEqual(perms.data["data"]["role"], "customer")

    def test_bad_credentials_are_401_and_audited(self):
        self._register()
        res = self.client.post("/api/auth/login/", {"email": "ada@example.com", "password": "wrong"}, format="json")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["message"], "Invalid email or password")
        self.assertTrue(AccountAuditLog.objects.filter(action=AccountAuditLog.ACTION_LOGIN_FAILED).exists())

    def test_refresh_token(self):
        tokens = self._register().data["data"]
        res = self.client.post("/api/auth/token/refresh/", {"refresh": tokens["refresh"]}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertIn("access", res.data)

    def test_me_requires_token(self):
        self.assertEqual(self.client.get("/api/auth/me/").status_code, 401)

    def test_password_reset_for_unknown_email_is_silent(self):
        res = self.client.post("/api/auth/password-reset/", {"email": "nobody@example.com"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["message"], "If an account exists for this email, a password reset link has been sent")
        self.assertEqual(mail.outbox, [])

    def test_password_reset_round_trip(self):
        self._register()
        mail.outbox.clear()

        res = self.client.post("/api/auth/password-reset/", {"email": "ada@example.com"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "Password Reset Request")

        html = mail.outbox[0].alternatives[0][0]
        link = re.search(r'href="([^"]*reset-password[^"]*)"', html).group(1).replace("&amp;", "&")
        query = parse_qs(urlparse(link).query)

        new_password = "Another-Fresh-Pass-99"
        with self.captureOnCommitCallbacks(execute=True):
            res = self.client.post(
                "/api/auth/password-reset/confirm/",
                {"uid": query["uid"][0], "token": query["token"][0], "new_password": new_password},
                format="json",
            )
        self.assertEqual(res.status_code, 200)
        self.assertTrue(get_user_model().objects.get(email="ada@example.com").check_password(new_password))
        self.assertEqual(mail.outbox[-1].subject, "Password Changed Successfully - Fresh County")

    def test_password_reset_confirm_rejects_bad_token(self):
        self._register()
        res = self.client.post(
            "/api/auth/password-reset/confirm/",
            {"uid": "MQ", "token": "bad-token", "new_password": "Another-Fresh-Pass-99"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.data["success"])
