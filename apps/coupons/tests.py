from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from apps.accounts.models import AccountProfile
from apps.coupons.application.services.coupon_admin_service import CouponAdminService
from apps.coupons.application.services.coupon_validator import CouponValidator
from apps.coupons.application.services.usage_recorder import CouponUsageRecorder
from apps.coupons.domain.errors import CouponError, CouponInUseError, CouponValidationError
from apps.coupons.domain.policies import compute_discount
from apps.coupons.models import Coupon, CouponUsage
from apps.orders.models import Order


def make_user(email, role="customer"):
    user = get_user_model().objects.create_user(username=email, email=email, password="pw")
    AccountProfile.objects.create(user=user, role=role)
    return user


class DiscountRulesTests(SimpleTestCase):
    def test_percentage_is_capped(self):
        discount = compute_discount(
            coupon_type="percentage",
            discount_value=Decimal("50"),
            subtotal=Decimal("1000"),
            maximum_discount_amount=Decimal("300"),
        )
        self.assertEqual(discount, Decimal("300.00"))

    def test_percentage_without_cap(self):
        self.assertEqual(
            compute_discount(coupon_type="percentage", discount_value=Decimal("12.5"), subtotal=Decimal("99.99")),
            Decimal("12.50"),
        )

    def test_fixed_amount_never_exceeds_subtotal(self):
        discount = compute_discount(coupon_type="fixed_amount", discount_value=Decimal("10000"), subtotal=Decimal("50"))
        self.assertEqual(discount, Decimal("50.00"))

    def test_free_shipping_discounts_shipping_cost(self):
        discount = compute_discount(
            coupon_type="free_shipping",
            discount_value=Decimal("0"),
            subtotal=Decimal("800"),
            shipping_cost=Decimal("1500"),
        )
        self.assertEqual(discount, Decimal("1500.00"))


class CouponValidatorTests(TestCase):
    def setUp(self):
        self.user = make_user("ada@example.com")
        self.now = timezone.now()

    def _coupon(self, **overrides):
        values = {"code": "SAVE10", "name": "Save ten", "type": "percentage", "discount_value": Decimal("10")}
        values.update(overrides)
        return Coupon.objects.create(**values)

    def _reason(self, code="SAVE10", subtotal="1000"):
        with self.assertRaises(CouponError) as ctx:
            CouponValidator.validate(code, Decimal(subtotal), self.user.pk, now=self.now)
        return ctx.exception.reason

    def test_code_is_case_insensitive(self):
        self._coupon()
        result = CouponValidator.validate(" save10 ", Decimal("1000"), self.user.pk)
        self.assertEqual(result.discount_amount, Decimal("100.00"))

    def test_unknown_and_inactive_codes_are_invalid(self):
        self.assertEqual(self._reason("GHOST"), "invalid")
        self._coupon(is_active=False)
        self.assertEqual(self._reason(), "invalid")

    def test_window_checks(self):
        self._coupon(starts_at=self.now + timedelta(days=1))
        self.assertEqual(self._reason(), "not_started")
        Coupon.objects.update(starts_at=None, expires_at=self.now - timedelta(seconds=1))
        self.assertEqual(self._reason(), "expired")

    def test_minimum_order_amount(self):
        self._coupon(minimum_order_amount=Decimal("5000"))
        with self.assertRaises(CouponError) as ctx:
            CouponValidator.validate("SAVE10", Decimal("4999.99"), self.user.pk)
        self.assertEqual(ctx.exception.reason, "minimum_not_met")
        self.assertEqual(ctx.exception.message, "Minimum order amount of 5000.00 required for this coupon")

    def test_global_usage_limit(self):
        self._coupon(usage_limit=2, used_count=2)
        self.assertEqual(self._reason(), "usage_limit")

    def test_validation_never_records_usage(self):
        coupon = self._coupon()
        CouponValidator.validate("SAVE10", Decimal("1000"), self.user.pk)
        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 0)
        self.assertFalse(CouponUsage.objects.exists())

    def test_recorder_inserts_usage_and_counts(self):
        coupon = self._coupon(usage_limit_per_customer=1)
        order = Order.objects.create(order_number="FC1", user=self.user)
        CouponUsageRecorder.record(coupon=coupon, user=self.user, order=order, discount=Decimal("100"))

        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1)
        self.assertEqual(self._reason(), "customer_limit")

        other = make_user("bola@example.com")
        self.assertEqual(
            CouponValidator.validate("SAVE10", Decimal("1000"), other.pk).discount_amount,
            Decimal("100.00"),
        )


class CouponModelTests(TestCase):
    def test_code_is_stored_uppercase(self):
        coupon = Coupon.objects.create(code="fresh5", name="Fresh", type="fixed_amount", discount_value=Decimal("5"))
        self.assertEqual(coupon.code, "FRESH5")

    def test_clean_rejects_inverted_window(self):
        now = timezone.now()
        coupon = Coupon(
            code="BAD",
            name="Bad",
            type="fixed_amount",
            discount_value=Decimal("5"),
            starts_at=now,
            expires_at=now - timedelta(days=1),
        )
        with self.assertRaises(ValidationError):
            coupon.clean()


class CouponAdminServiceTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin@example.com", role="admin")

    def test_create_rejects_inverted_window(self):
        now = timezone.now()
        with self.assertRaises(CouponValidationError):
            CouponAdminService.create(
                values={
                    "code": "WINDOW",
                    "name": "Window",
                    "type": "fixed_amount",
                    "discount_value": Decimal("5"),
                    "starts_at": now,
                    "expires_at": now,
                },
                created_by=self.admin,
            )

    def test_used_coupon_cannot_be_deleted(self):
        coupon = Coupon.objects.create(code="USED", name="Used", type="fixed_amount", discount_value=Decimal("5"), used_count=1)
        with self.assertRaises(CouponInUseError):
            CouponAdminService.delete(coupon=coupon)
        self.assertTrue(Coupon.objects.filter(pk=coupon.pk).exists())


class CouponApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.customer = make_user("ada@example.com")
        self.manager = make_user("manager@example.com", role="manager")
        Coupon.objects.create(
            code="HALF",
            name="Half",
            type="percentage",
            discount_value=Decimal("50"),
            maximum_discount_amount=Decimal("300"),
        )

    def test_validate_endpoint(self):
        self.client.force_authenticate(self.customer)
        res = self.client.post("/api/coupons/validate/", {"code": "half", "order_amount": "1000"}, format="json")
        self.assertEqual(res.status_code, 200)
        data = res.data["data"]
        self.assertEqual(data["discount_amount"], Decimal("300.00"))
        self.assertEqual(data["final_amount"], Decimal("700.00"))

    def test_validate_endpoint_error_envelope(self):
        self.client.force_authenticate(self.customer)
        res = self.client.post("/api/coupons/validate/", {"code": "NOPE", "order_amount": "1000"}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["message"], "Invalid or inactive coupon code")

    def test_customer_cannot_manage_coupons(self):
        self.client.force_authenticate(self.customer)
        res = self.client.get("/api/admin/coupons/")
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["message"], "You do not have permission to perform this action")

    def test_manager_crud_flow(self):
        self.client.force_authenticate(self.manager)
        res = self.client.post(
            "/api/admin/coupons/",
            {"code": "new10", "name": "New", "type": "fixed_amount", "discount_value": "10"},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        coupon_id = res.data["data"]["coupon"]["id"]
        self.assertEqual(res.data["data"]["coupon"]["code"], "NEW10")

        res = self.client.post(
            "/api/admin/coupons/",
            {"code": "NEW10", "name": "Dup", "type": "fixed_amount", "discount_value": "10"},
            format="json",
        )
        self.assertEqual(res.status_code, 409)

        res = self.client.patch(f"/api/admin/coupons/{coupon_id}/", {"is_active": False}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.data["data"]["coupon"]["is_active"])

        res = self.client.get(f"/api/admin/coupons/{coupon_id}/")
        self.assertEqual(res.data["data"]["usage_stats"]["total_uses"], 0)

        res = self.client.get("/api/admin/coupons/", {"search": "new", "is_active": "false"})
        self.assertEqual(res.data["data"]["pagination"]["total_items"], 1)

        res = self.client.delete(f"/api/admin/coupons/{coupon_id}/")
        self.assertEqual(res.status_code, 200)

    def test_stats_endpoint(self):
        self.client.force_authenticate(self.manager)
        res = self.client.get("/api/admin/coupons/stats/", {"period": 7})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["overview"]["total_coupons"], 1)
