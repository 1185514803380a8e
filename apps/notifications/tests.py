from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.template import TemplateDoesNotExist
from django.test import SimpleTestCase, TestCase, override_settings

from apps.catalog.models import Product
from apps.notifications.application.services.dispatcher import NotificationDispatcher, notify_admins
from apps.notifications.application.services.order_emails import build_order_email_data
from apps.notifications.application.services.templates import FALLBACK_TEMPLATES, render_email
from apps.notifications.domain.events import AdminAlertType, NotificationEvent
from apps.orders.models import Order, OrderItem

TEMPLATE_LOADER = "apps.notifications.application.services.templates.get_template"


def _missing(name):
    raise TemplateDoesNotExist(name)


class TemplateResolutionTests(SimpleTestCase):
    def test_named_template_is_used(self):
        html = render_email("welcome", {"first_name": "Ada", "company_name": "Fresh County"})
        self.assertIn("Ada", html)

    def test_welcome_greets_by_full_name_when_first_name_missing(self):
        self.assertIn("Dear Ada Obi,", render_email("welcome", {"full_name": "Ada Obi", "company_name": "Fresh County"}))
        self.assertIn("Dear Ada,", render_email("welcome", {"first_name": "Ada"}))

    def test_known_template_falls_back_to_builtin(self):
        with mock.patch(TEMPLATE_LOADER, side_effect=_missing):
            html = render_email("order-confirmation", {"customer_name": "Ada", "order_number": "FC1"})
        self.assertIn("<h2>Order Confirmation</h2>", html)
        self.assertIn("#FC1", html)

    def test_unknown_template_uses_generic_body(self):
        with mock.patch(TEMPLATE_LOADER, side_effect=_missing):
            html = render_email("mystery", {"title": "Heads up", "message": "Something happened"})
        self.assertEqual(html, "<h2>Heads up</h2><p>Something happened</p>")

    def test_builtin_fallbacks_and_alert_types(self):
        self.assertEqual(set(FALLBACK_TEMPLATES), {"order-confirmation", "welcome", "password-reset"})
        self.assertEqual({alert.value for alert in AdminAlertType}, {"new_order", "order_status"})


class DispatcherTests(TestCase):
    def test_order_confirmation_subject_and_alternatives(self):
        sent = NotificationDispatcher.dispatch(
            NotificationEvent.ORDER_CONFIRMATION,
            "ada@example.com",
            {"order_number": "FC123", "customer_name": "Ada", "items": [], "order_total": "₦10.00"},
        )
        self.assertTrue(sent)
        message = mail.outbox[0]
        self.assertEqual(message.subject, "Order Confirmation - #FC123")
        self.assertEqual(message.to, ["ada@example.com"])
        self.assertEqual(message.alternatives[0][1], "text/html")
        self.assertNotIn("<h2>", message.body)

    def test_status_update_subjects(self):
        for status, subject in (
            ("delivered", "Order Delivered - #FC9"),
            ("cancelled", "Order Cancelled - #FC9"),
            ("processing", "Order Update - #FC9"),
        ):
            NotificationDispatcher.dispatch(
                NotificationEvent.ORDER_STATUS_UPDATE,
                "ada@example.com",
                {"order_number": "FC9", "order_status": status, "items": []},
            )
            self.assertEqual(mail.outbox[-1].subject, subject)

    def test_shipped_update_is_suppressed(self):
        sent = NotificationDispatcher.dispatch(
            NotificationEvent.ORDER_STATUS_UPDATE,
            "ada@example.com",
            {"order_number": "FC9", "order_status": "shipped"},
        )
        self.assertTrue(sent)
        self.assertEqual(mail.outbox, [])

    def test_delivery_failure_is_logged_not_raised(self):
        with mock.patch.object(NotificationDispatcher, "gateway") as gateway:
            gateway.send_email.side_effect = ConnectionError("smtp unreachable")
            with self.assertLogs("freshcounty.notifications", level="ERROR") as logs:
                sent = NotificationDispatcher.dispatch(NotificationEvent.WELCOME, "ada@example.com", {"first_name": "Ada"})
        self.assertFalse(sent)
        self.assertIn("notification delivery failed", logs.output[0])

    def test_no_recipients_returns_false(self):
        self.assertFalse(NotificationDispatcher.dispatch(NotificationEvent.WELCOME, [], {}))

    @override_settings(ADMIN_NOTIFICATION_EMAILS=["ops@example.com", "owner@example.com"])
    def test_notify_admins_sends_admin_alert(self):
        self.assertTrue(notify_admins("Low stock", "Tomatoes are running out", {"sku": "VEG-TOM-1"}))
        message = mail.outbox[0]
        self.assertEqual(message.subject, "Admin Alert: Low stock")
        self.assertEqual(message.to, ["ops@example.com", "owner@example.com"])
        self.assertIn("Tomatoes are running out", message.body)


class OrderEmailDataTests(TestCase):
    def setUp(self):
        user = get_user_model().objects.create_user(
            username="ada@example.com", email="ada@example.com", password="pw", first_name="Ada"
        )
        product = Product.objects.create(name="Tomatoes", slug="tomatoes", sku="VEG-TOM-1", price=Decimal("1000"))
        self.order = Order.objects.create(
            order_number="FC00000001123",
            user=user,
            subtotal=Decimal("2000"),
            tax_amount=Decimal("150"),
            shipping_cost=Decimal("1500"),
            total_amount=Decimal("3650"),
            shipping_address={"first_name": "Ada", "last_name": "Obi", "address": "1 Marina", "city": "Lagos"},
        )
        OrderItem.objects.create(
            order=self.order, product=product, product_name="Tomatoes", quantity=2, price=Decimal("1000")
        )

    def test_payload_formats_money_and_address(self):
        data = build_order_email_data(self.order, "confirmed")
        self.assertEqual(data["customer_name"], "Ada Obi")
        self.assertEqual(data["order_total"], "₦3,650.00")
        self.assertEqual(data["items"][0]["total"], "₦2,000.00")
        self.assertEqual(data["shipping_address"]["street"], "1 Marina")
        self.assertIsNone(data["discount"])
        self.assertIsNone(data["estimated_delivery"])

    def test_shipped_payload_has_tracking_and_estimate(self):
        data = build_order_email_data(self.order, "shipped", tracking_number="TRK-1")
        self.assertEqual(data["tracking_number"], "TRK-1")
        self.assertIsNotNone(data["estimated_delivery"])
