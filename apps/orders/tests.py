from __future__ import annotations

import re
import uuid
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from apps.accounts.models import AccountProfile
from apps.cart.models import CartItem
from apps.catalog.domain.errors import InsufficientStockError, ProductNotFoundError
from apps.catalog.models import Product
from apps.coupons.models import Coupon, CouponUsage
from apps.orders.application.queries.order_history import OrderStatusHistoryQuery
from apps.orders.application.use_cases.cancel_order import CancelOrderCommand, CancelOrderUseCase
from apps.orders.application.use_cases.create_order import (
    CreateOrderCommand,
    CreateOrderUseCase,
    OrderLineInput,
)
from apps.orders.application.use_cases.update_order_status import (
    BulkUpdateOrderStatusCommand,
    BulkUpdateOrderStatusUseCase,
    UpdateOrderStatusCommand,
    UpdateOrderStatusUseCase,
)
from apps.orders.domain.errors import (
    InvalidStatusTransitionError,
    OrderNotCancellableError,
    OrderNotFoundError,
    PriceMismatchError,
)
from apps.orders.domain.order_number import generate_order_number
from apps.orders.domain.pricing import LineItem, calculate_totals
from apps.orders.domain.status import admin_alert_needed, admin_alert_title, can_transition
from apps.orders.models import Order, OrderItem, OrderStatusHistory
from apps.system.domain.settings import StoreSettings

ADDRESS = {"first_name": "Ada", "last_name": "Obi", "address": "1 Marina Road", "city": "Lagos", "state": "Lagos"}


def make_user(email: str, role: str = "customer"):
    user = get_user_model().objects.create_user(username=email, email=email, password="pass12345")
    AccountProfile.objects.create(user=user, role=role, full_name=email.split("@")[0].title())
    return user


def make_product(name: str, *, price: str = "1000", stock: int = 10, **extra) -> Product:
    slug = name.lower().replace(" ", "-")
    return Product.objects.create(
        name=name,
        slug=slug,
        sku=f"GEN-{slug[:3].upper()}-{uuid.uuid4().hex[:6]}",
        price=Decimal(price),
        stock_quantity=stock,
        **extra,
    )


class PricingTests(SimpleTestCase):
    settings = StoreSettings()

    def test_tax_is_rounded_to_cents(self):
        totals = calculate_totals([LineItem(price=Decimal("100.00"), quantity=1)], self.settings)
        self.assertEqual(totals.tax_amount, Decimal("7.50"))
        self.assertEqual(totals.total_amount, Decimal("1607.50"))

    def test_half_cent_tax_rounds_up(self):
        totals = calculate_totals([LineItem(price=Decimal("0.10"), quantity=1)], self.settings)
        # 0.10 * 7.5% = 0.0075
        self.assertEqual(totals.tax_amount, Decimal("0.01"))

    def test_free_shipping_threshold_is_inclusive(self):
        below = calculate_totals([{"price": "49999.99", "quantity": 1}], self.settings)
        at = calculate_totals([{"price": "50000.00", "quantity": 1}], self.settings)
        self.assertEqual(below.shipping_cost, Decimal("1500.00"))
        self.assertEqual(at.shipping_cost, Decimal("0.00"))

    def test_empty_items_charge_full_shipping(self):
        totals = calculate_totals([], self.settings)
        self.assertEqual(totals.subtotal, Decimal("0.00"))
        self.assertEqual(totals.tax_amount, Decimal("0.00"))
        self.assertEqual(totals.shipping_cost, Decimal("1500.00"))

    def test_shipping_override_wins(self):
        totals = calculate_totals([{"price": "60000", "quantity": 1}], self.settings, shipping_override="2500")
        self.assertEqual(totals.shipping_cost, Decimal("2500.00"))

    def test_discount_never_takes_total_below_zero(self):
        totals = calculate_totals([{"price": "50", "quantity": 1}], self.settings).with_discount(Decimal("999999"))
        self.assertEqual(totals.total_amount, Decimal("0.00"))
        self.assertEqual(totals.discount_amount, Decimal("999999.00"))


class OrderRulesTests(SimpleTestCase):
    def test_order_number_format(self):
        self.assertEqual(generate_order_number(now_ms=1700000123456, random_digits=7), "FC00123456007")
        self.assertRegex(generate_order_number(), r"^FC\d{11}$")

    def test_transition_table(self):
        self.assertTrue(can_transition("pending", "confirmed"))
        self.assertTrue(can_transition("confirmed", "cancelled"))
        self.assertFalse(can_transition("processing", "cancelled"))
        self.assertFalse(can_transition("delivered", "pending"))

    def test_admin_alert_rules(self):
        self.assertTrue(admin_alert_needed("pending", "confirmed"))
        self.assertFalse(admin_alert_needed("confirmed", "confirmed"))
        self.assertFalse(admin_alert_needed("confirmed", "processing"))
        self.assertTrue(admin_alert_needed("shipped", "delivered"))
        self.assertEqual(admin_alert_title("pending", "confirmed"), "New Order Received")
        self.assertEqual(admin_alert_title("pending", "cancelled"), "Order Cancelled")


class CreateOrderTests(TestCase):
    def setUp(self):
        self.user = make_user("ada@example.com")
        self.product = make_product("Tomatoes", price="1000", stock=10)

    def _place(self, items, user=None, **kwargs):
        return CreateOrderUseCase.execute(
            CreateOrderCommand(user=user or self.user, items=items, shipping_address=ADDRESS, **kwargs)
        )

    def _create(self, items, user=None, **kwargs):
        return self._place(items, user=user, **kwargs).order

    def test_end_to_end_totals_stock_and_history(self):
        order = self._create([OrderLineInput(product_id=self.product.pk, quantity=2, price=Decimal("1000"))])

        self.assertEqual(order.subtotal, Decimal("2000.00"))
        self.assertEqual(order.tax_amount, Decimal("150.00"))
        self.assertEqual(order.shipping_cost, Decimal("1500.00"))
        self.assertEqual(order.total_amount, Decimal("3650.00"))
        self.assertEqual(order.status, "pending")
        self.assertEqual(order.payment_status, "pending")
        self.assertTrue(re.match(r"^FC\d{11}$", order.order_number))

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 8)

        history = list(OrderStatusHistory.objects.filter(order=order))
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].status, "pending")
        self.assertEqual(history[0].notes, "Order created")

    def test_insufficient_stock_rolls_back_whole_order(self):
        scarce = make_product("Peppers", stock=1)
        with self.assertRaises(InsufficientStockError) as ctx:
            self._create(
                [
                    OrderLineInput(product_id=self.product.pk, quantity=2, price=Decimal("1000")),
                    OrderLineInput(product_id=scarce.pk, quantity=3, price=Decimal("1000")),
                ]
            )

        self.assertIn("Peppers", ctx.exception.message)
        self.assertEqual(ctx.exception.available, 1)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)

    def test_inactive_product_is_rejected(self):
        hidden = make_product("Old Stock", status=Product.STATUS_INACTIVE)
        with self.assertRaises(ProductNotFoundError):
            self._create([OrderLineInput(product_id=hidden.pk, quantity=1, price=Decimal("1000"))])
        self.assertEqual(Order.objects.count(), 0)

    def test_client_price_is_the_snapshot(self):
        self.product.price = Decimal("1200")
        self.product.save()
        order = self._create([OrderLineInput(product_id=self.product.pk, quantity=1, price=Decimal("1000"))])
        self.assertEqual(order.items.get().price, Decimal("1000.00"))
        self.assertEqual(order.subtotal, Decimal("1000.00"))

    @override_settings(ORDERS_TRUST_CLIENT_PRICE=False)
    def test_price_mismatch_rejected_when_client_price_untrusted(self):
        with self.assertRaises(PriceMismatchError):
            self._create([OrderLineInput(product_id=self.product.pk, quantity=1, price=Decimal("1"))])
        self.assertEqual(Order.objects.count(), 0)

    def test_coupon_usage_recorded_and_counted(self):
        coupon = Coupon.objects.create(
            code="SAVE50",
            name="Half off",
            type="percentage",
            discount_value=Decimal("50"),
            maximum_discount_amount=Decimal("300"),
        )
        order = self._create(
            [OrderLineInput(product_id=self.product.pk, quantity=1, price=Decimal("1000"))],
            coupon_code="save50",
        )

        self.assertEqual(order.discount_amount, Decimal("300.00"))
        self.assertEqual(order.total_amount, Decimal("1000.00") + Decimal("75.00") + Decimal("1500.00") - Decimal("300.00"))
        self.assertEqual(order.coupon_code, "SAVE50")
        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1)
        self.assertEqual(CouponUsage.objects.filter(order=order).count(), 1)

    def test_per_customer_coupon_cap(self):
        Coupon.objects.create(
            code="ONCE",
            name="Once per customer",
            type="fixed_amount",
            discount_value=Decimal("100"),
            usage_limit_per_customer=1,
        )
        line = [OrderLineInput(product_id=self.product.pk, quantity=1, price=Decimal("1000"))]
        self._create(line, coupon_code="ONCE")

        placed = self._place(line, coupon_code="ONCE")
        self.assertEqual(placed.coupon_error.reason, "customer_limit")
        self.assertEqual(placed.order.discount_amount, Decimal("0.00"))
        self.assertEqual(CouponUsage.objects.filter(user=self.user).count(), 1)

        other = make_user("bola@example.com")
        order = self._create(line, user=other, coupon_code="ONCE")
        self.assertEqual(order.discount_amount, Decimal("100.00"))

    def test_rejected_coupon_places_order_at_full_price(self):
        Coupon.objects.create(
            code="OLD10",
            name="Expired",
            type="fixed_amount",
            discount_value=Decimal("10"),
            expires_at=timezone.now() - timedelta(days=1),
        )
        for code, reason in (("NOPE", "invalid"), ("OLD10", "expired")):
            placed = self._place(
                [OrderLineInput(product_id=self.product.pk, quantity=1, price=Decimal("1000"))],
                coupon_code=code,
            )
            self.assertEqual(placed.coupon_error.reason, reason)
            self.assertEqual(placed.order.discount_amount, Decimal("0.00"))
            self.assertEqual(placed.order.total_amount, Decimal("2575.00"))
            self.assertIsNone(placed.order.coupon_id)
            self.assertEqual(placed.order.coupon_code, "")
        self.assertEqual(Order.objects.count(), 2)
        self.assertFalse(CouponUsage.objects.exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 8)

    def test_unmanaged_stock_still_limits_checkout(self):
        bread = make_product("Bread", stock=0, manage_stock=False)
        with self.assertRaises(InsufficientStockError):
            self._create([OrderLineInput(product_id=bread.pk, quantity=3, price=Decimal("1000"))])
        self.assertEqual(Order.objects.count(), 0)

    def test_cancel_restores_what_checkout_took_after_stock_flag_changes(self):
        bread = make_product("Bread", stock=5, manage_stock=False)
        order = self._create([OrderLineInput(product_id=bread.pk, quantity=2, price=Decimal("1000"))])
        bread.refresh_from_db()
        self.assertEqual(bread.stock_quantity, 3)

        Product.objects.filter(pk=bread.pk).update(manage_stock=True)
        CancelOrderUseCase.execute(CancelOrderCommand(user=self.user, order_id=order.pk))
        bread.refresh_from_db()
        self.assertEqual(bread.stock_quantity, 5)

    def test_checkout_clears_user_cart(self):
        CartItem.objects.create(user=self.user, product=self.product, quantity=2, price=Decimal("1000"))
        self._create([OrderLineInput(product_id=self.product.pk, quantity=2, price=Decimal("1000"))])
        self.assertFalse(CartItem.objects.filter(user=self.user).exists())

    def test_admin_is_alerted_after_commit_only(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            order = self._create([OrderLineInput(product_id=self.product.pk, quantity=1, price=Decimal("1000"))])
        self.assertEqual(len(callbacks), 1)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "Admin Alert: New Order Received")
        self.assertIn(order.order_number, mail.outbox[0].body)


class UpdateOrderStatusTests(TestCase):
    def setUp(self):
        self.user = make_user("ada@example.com")
        self.staff = make_user("staff@example.com", role="staff")
        self.product = make_product("Tomatoes", stock=10)
        self.order = CreateOrderUseCase.execute(
            CreateOrderCommand(
                user=self.user,
                items=[OrderLineInput(product_id=self.product.pk, quantity=3, price=Decimal("1000"))],
                shipping_address=ADDRESS,
            )
        ).order

    def _transition(self, status, **kwargs):
        return UpdateOrderStatusUseCase.execute(
            UpdateOrderStatusCommand(order_id=self.order.pk, new_status=status, actor=self.staff, **kwargs)
        )

    def test_cancel_restores_stock_exactly_once(self):
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 7)

        self._transition("cancelled")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)

        self._transition("cancelled")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)

    def test_every_transition_appends_one_history_row(self):
        for status in ("confirmed", "processing", "shipped", "delivered"):
            self._transition(status)
        statuses = list(OrderStatusHistory.objects.filter(order=self.order).values_list("status", flat=True))
        self.assertEqual(statuses, ["pending", "confirmed", "processing", "shipped", "delivered"])

    def test_history_rows_cannot_be_edited_or_deleted(self):
        row = OrderStatusHistory.objects.get(order=self.order)
        row.notes = "rewritten"
        with self.assertRaises(ValueError):
            row.save()
        with self.assertRaises(ValueError):
            row.delete()

    def test_delivered_marks_pending_payment_paid(self):
        change = self._transition("delivered", tracking_number="TRK-1")
        self.assertEqual(change.order.payment_status, "paid")
        self.order.refresh_from_db()
        self.assertEqual(self.order.tracking_number, "TRK-1")

    def test_illegal_transition_permitted_by_default(self):
        self._transition("delivered")
        change = self._transition("pending")
        self.assertEqual(change.order.status, "pending")

    @override_settings(ORDERS_ENFORCE_TRANSITIONS=True)
    def test_illegal_transition_rejected_when_enforced(self):
        with self.assertRaises(InvalidStatusTransitionError):
            self._transition("delivered")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "pending")

    def test_unknown_order(self):
        with self.assertRaises(OrderNotFoundError):
            UpdateOrderStatusUseCase.execute(UpdateOrderStatusCommand(order_id=uuid.uuid4(), new_status="confirmed"))

    def test_confirmation_emails_customer_and_admin(self):
        with self.captureOnCommitCallbacks(execute=True):
            self._transition("confirmed")
        subjects = sorted(message.subject for message in mail.outbox)
        self.assertEqual(
            subjects,
            ["Admin Alert: New Order Received", f"Order Update - #{self.order.order_number}"],
        )

    def test_shipped_sends_no_email(self):
        self._transition("confirmed")
        self._transition("processing")
        with self.captureOnCommitCallbacks(execute=True):
            self._transition("shipped", tracking_number="TRK-9")
        self.assertEqual(mail.outbox, [])

    def test_email_failure_does_not_undo_transition(self):
        target = "apps.notifications.application.services.dispatcher.NotificationDispatcher.gateway"
        with mock.patch(target) as gateway:
            gateway.send_email.side_effect = RuntimeError("smtp down")
            with self.assertLogs("freshcounty.notifications", level="ERROR"):
                with self.captureOnCommitCallbacks(execute=True):
                    self._transition("cancelled")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "cancelled")

    def test_bulk_update_counts_failures(self):
        result = BulkUpdateOrderStatusUseCase.execute(
            BulkUpdateOrderStatusCommand(order_ids=[self.order.pk, uuid.uuid4()], new_status="confirmed")
        )
        self.assertEqual(result.success_count, 1)
        self.assertEqual(result.total_count, 2)
        self.assertEqual(len(result.failures), 1)

    def test_history_query_is_oldest_first_with_actor(self):
        self._transition("confirmed", notes="Payment received")
        history = OrderStatusHistoryQuery.for_order(self.order)
        self.assertEqual([row["status"] for row in history], ["pending", "confirmed"])
        self.assertEqual(history[1]["notes"], "Payment received")
        self.assertEqual(history[1]["changed_by_name"], "Staff")


class CancelOrderTests(TestCase):
    def setUp(self):
        self.user = make_user("ada@example.com")
        self.product = make_product("Tomatoes", stock=5)
        self.order = CreateOrderUseCase.execute(
            CreateOrderCommand(
                user=self.user,
                items=[OrderLineInput(product_id=self.product.pk, quantity=2, price=Decimal("1000"))],
                shipping_address=ADDRESS,
            )
        ).order

    def test_customer_can_cancel_pending_order(self):
        change = CancelOrderUseCase.execute(CancelOrderCommand(user=self.user, order_id=self.order.pk, reason="Changed mind"))
        self.assertEqual(change.order.status, "cancelled")
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)
        self.assertIn("Changed mind", OrderStatusHistory.objects.filter(order=self.order).last().notes)

    def test_processing_order_cannot_be_cancelled_by_customer(self):
        Order.objects.filter(pk=self.order.pk).update(status="processing")
        with self.assertRaises(OrderNotCancellableError):
            CancelOrderUseCase.execute(CancelOrderCommand(user=self.user, order_id=self.order.pk))

    def test_other_customer_cannot_cancel(self):
        other = make_user("bola@example.com")
        with self.assertRaises(OrderNotFoundError):
            CancelOrderUseCase.execute(CancelOrderCommand(user=other, order_id=self.order.pk))


class OrderApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user("ada@example.com")
        self.product = make_product("Tomatoes", stock=10)

    def _payload(self, quantity=2):
        return {
            "items": [{"product_id": self.product.pk, "quantity": quantity, "price": "1000.00"}],
            "shipping_address": ADDRESS,
            "payment_method": "bank_transfer",
        }

    def _place_order(self):
        self.client.force_authenticate(self.user)
        res = self.client.post("/api/orders/", self._payload(), format="json")
        self.assertEqual(res.status_code, 201)
        return res.data["data"]["order"]

    def test_create_requires_authentication(self):
        res = self.client.post("/api/orders/", self._payload(), format="json")
        self.assertEqual(res.status_code, 401)
        self.assertFalse(res.data["success"])

    def test_create_and_list_orders(self):
        order = self._place_order()
        self.assertEqual(Decimal(order["total_amount"]), Decimal("3650.00"))
        self.assertEqual(len(order["items"]), 1)

        res = self.client.get("/api/orders/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["pagination"]["total_items"], 1)
        self.assertEqual(res.data["data"]["orders"][0]["item_count"], 1)

    def test_unknown_coupon_is_reported_without_blocking_checkout(self):
        self.client.force_authenticate(self.user)
        res = self.client.post("/api/orders/", {**self._payload(), "coupon_code": "GHOST"}, format="json")
        self.assertEqual(res.status_code, 201)
        data = res.data["data"]
        self.assertEqual(data["coupon_error"]["reason"], "invalid")
        self.assertEqual(data["coupon_error"]["message"], "Invalid or inactive coupon code")
        self.assertEqual(Decimal(data["order"]["discount_amount"]), Decimal("0.00"))

    def test_validation_envelope_for_empty_items(self):
        self.client.force_authenticate(self.user)
        res = self.client.post("/api/orders/", {"items": [], "shipping_address": ADDRESS}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["message"], "Validation failed")
        self.assertEqual(res.data["errors"][0]["field"], "items")

    def test_insufficient_stock_is_business_error(self):
        self.client.force_authenticate(self.user)
        res = self.client.post("/api/orders/", self._payload(quantity=50), format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["message"], "Insufficient stock for Tomatoes. Available: 10")

    def test_order_detail_includes_history_and_hides_other_users_orders(self):
        order = self._place_order()
        res = self.client.get(f"/api/orders/{order['id']}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data["data"]["status_history"]), 1)

        self.client.force_authenticate(make_user("bola@example.com"))
        res = self.client.get(f"/api/orders/{order['id']}/")
        self.assertEqual(res.status_code, 404)

    def test_customer_cancel_endpoint(self):
        order = self._place_order()
        res = self.client.post(f"/api/orders/{order['id']}/cancel/", {"reason": "Too slow"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["order"]["status"], "cancelled")

    def test_customer_cannot_use_admin_status_endpoint(self):
        order = self._place_order()
        res = self.client.patch(f"/api/admin/orders/{order['id']}/status/", {"status": "confirmed"}, format="json")
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["message"], "You do not have permission to perform this action")

    def test_staff_updates_status_and_reads_history(self):
        order = self._place_order()
        self.client.force_authenticate(make_user("staff@example.com", role="staff"))

        res = self.client.patch(
            f"/api/admin/orders/{order['id']}/status/",
            {"status": "confirmed", "notes": "Paid"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["previous_status"], "pending")

        res = self.client.get(f"/api/admin/orders/{order['id']}/history/")
        self.assertEqual([row["status"] for row in res.data["data"]["history"]], ["pending", "confirmed"])

        res = self.client.get(f"/api/admin/orders/{order['id']}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["order"]["tax_rate"], Decimal("7.5"))

    def test_admin_list_filters_and_bulk_status(self):
        first = self._place_order()
        second = self._place_order()
        self.client.force_authenticate(make_user("boss@example.com", role="admin"))

        res = self.client.post(
            "/api/admin/orders/bulk-status/",
            {"order_ids": [first["id"], second["id"]], "status": "confirmed"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["success_count"], 2)

        res = self.client.get("/api/admin/orders/", {"status": "confirmed", "search": "ada@"})
        self.assertEqual(res.data["data"]["pagination"]["total_items"], 2)
