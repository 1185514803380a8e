from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase
from rest_framework import exceptions, serializers
from rest_framework.request import Request
from rest_framework.test import APIRequestFactory

from apps.core.domain.errors import ConflictError, InternalError
from apps.core.domain.money import format_money, round_money, to_decimal
from apps.core.interfaces.api.exception_handler import store_exception_handler
from apps.core.interfaces.api.pagination import page_params


class MoneyTests(SimpleTestCase):
    def test_round_half_up(self):
        self.assertEqual(round_money("2.675"), Decimal("2.68"))
        self.assertEqual(round_money(Decimal("0.005")), Decimal("0.01"))

    def test_floats_go_through_str(self):
        self.assertEqual(to_decimal(0.1), Decimal("0.1"))

    def test_bad_amount(self):
        with self.assertRaises(ValueError):
            to_decimal("abc")

    def test_format(self):
        self.assertEqual(format_money(Decimal("3650")), "₦3,650.00")
        self.assertEqual(format_money("12.5", "$"), "$12.50")


class PaginationParamsTests(SimpleTestCase):
    factory = APIRequestFactory()

    def _params(self, query):
        return page_params(Request(self.factory.get("/x", query)))

    def test_defaults_and_clamping(self):
        self.assertEqual(self._params({}), (1, 20))
        self.assertEqual(self._params({"page": "0", "limit": "500"}), (1, 100))
        self.assertEqual(self._params({"page": "x", "limit": "y"}), (1, 20))


class ExceptionHandlerTests(SimpleTestCase):
    def test_store_error_uses_its_status(self):
        response = store_exception_handler(ConflictError("Email taken", field="email"), {})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data, {"success": False, "message": "Email taken", "field": "email"})

    def test_validation_errors_are_flattened(self):
        exc = serializers.ValidationError({"email": ["Enter a valid email address."], "items": [{"quantity": ["Too small."]}]})
        response = store_exception_handler(exc, {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "Validation failed")
        self.assertIn({"field": "email", "message": "Enter a valid email address."}, response.data["errors"])
        self.assertIn({"field": "items.0.quantity", "message": "Too small."}, response.data["errors"])

    def test_permission_denied_message(self):
        response = store_exception_handler(exceptions.PermissionDenied(), {})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["message"], "You do not have permission to perform this action")

    def test_unexpected_errors_become_500(self):
        with self.assertLogs("freshcounty.request", level="ERROR"):
            response = store_exception_handler(RuntimeError("boom"), {})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {"success": False, "message": "Internal server error"})

    def test_internal_error_is_logged(self):
        with self.assertLogs("freshcounty.request", level="ERROR"):
            response = store_exception_handler(InternalError(), {})
        self.assertEqual(response.status_code, 500)
