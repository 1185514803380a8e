from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from apps.accounts.models import AccountProfile
from apps.catalog.models import Product
from apps.dashboard.application.services.dashboard_stats import DashboardStatsService
from apps.orders.models import Order


def make_user(email, role="customer"):
    user = get_user_model().objects.create_user(username=email, email=email, password="pw")
    AccountProfile.objects.create(user=user, role=role)
    return user


class DashboardStatsTests(TestCase):
    def setUp(self):
        self.customer = make_user("ada@example.com")
        Product.objects.create(name="Tomatoes", slug="tomatoes", sku="GEN-TOM-1", price=Decimal("10"), stock_quantity=3)
        Product.objects.create(name="Rice", slug="rice", sku="GEN-RIC-1", price=Decimal("10"), stock_quantity=50)
        Order.objects.create(order_number="FC1", user=self.customer, total_amount=Decimal("3650.00"))
        Order.objects.create(order_number="FC2", user=self.customer, total_amount=Decimal("1000.00"), status="cancelled")

    def test_overview_excludes_cancelled_revenue(self):
        stats = DashboardStatsService.overview()
        self.assertEqual(stats["totals"]["orders"], 2)
        self.assertEqual(stats["totals"]["revenue"], Decimal("3650.00"))
        self.assertEqual(stats["totals"]["customers"], 1)
        self.assertEqual(stats["totals"]["active_products"], 2)
        self.assertEqual(stats["orders_by_status"]["cancelled"], 1)
        self.assertEqual([p["name"] for p in stats["low_stock_products"]], ["Tomatoes"])
        self.assertEqual(len(stats["recent_orders"]), 2)

    def test_order_stats_by_day(self):
        stats = DashboardStatsService.order_stats(days=7)
        self.assertEqual(stats["total_orders"], 2)
        self.assertEqual(stats["total_revenue"], Decimal("3650.00"))
        self.assertEqual(len(stats["daily"]), 1)


class DashboardApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_customer_is_forbidden(self):
        self.client.force_authenticate(make_user("ada@example.com"))
        res = self.client.get("/api/admin/dashboard/")
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["message"], "You do not have permission to perform this action")

    def test_staff_sees_dashboard_and_order_stats(self):
        self.client.force_authenticate(make_user("staff@example.com", role="staff"))
        self.assertEqual(self.client.get("/api/admin/dashboard/").status_code, 200)
        self.assertEqual(self.client.get("/api/admin/dashboard/order-stats/?period=7").status_code, 200)

    def test_anonymous_gets_401(self):
        self.assertEqual(self.client.get("/api/admin/dashboard/").status_code, 401)
