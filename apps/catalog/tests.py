from __future__ import annotations

import re
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from apps.accounts.models import AccountProfile
from apps.catalog.application.services.inventory_service import InventoryService
from apps.catalog.application.services.product_service import ProductService, VariationInput
from apps.catalog.domain.errors import InsufficientStockError, SkuTakenError
from apps.catalog.domain.sku import code_from, product_sku_base, variation_sku_base
from apps.catalog.domain.stock import StockStatus, derive_stock_status, effective_price
from apps.catalog.models import Category, Product, ProductVariation, VariationOption, VariationType


class StockRulesTests(SimpleTestCase):
    def test_stock_status_thresholds(self):
        self.assertEqual(derive_stock_status(0), StockStatus.OUT_OF_STOCK)
        self.assertEqual(derive_stock_status(-3), StockStatus.OUT_OF_STOCK)
        self.assertEqual(derive_stock_status(5), StockStatus.LOW_STOCK)
        self.assertEqual(derive_stock_status(6), StockStatus.IN_STOCK)

    def test_effective_price_prefers_positive_sale_price(self):
        self.assertEqual(effective_price(Decimal("100"), Decimal("80")), Decimal("80"))
        self.assertEqual(effective_price(Decimal("100"), Decimal("0")), Decimal("100"))
        self.assertEqual(effective_price(Decimal("100"), None), Decimal("100"))


class SkuRulesTests(SimpleTestCase):
    def test_code_pads_short_names(self):
        self.assertEqual(code_from("Ox"), "OXX")
        self.assertEqual(code_from("fresh tomatoes"), "FRE")

    def test_product_sku_base(self):
        self.assertEqual(
            product_sku_base(name="Tomatoes", category_name="Vegetables", stamp_ms=1700000123456),
            "VEG-TOM-123456",
        )
        self.assertEqual(product_sku_base(name="Tomatoes", category_name=None, stamp_ms=1700000123456), "GEN-TOM-123456")

    def test_variation_sku_base(self):
        sku = variation_sku_base(
            product_sku="VEG-TOM-123456",
            option_pairs=[("size", "large"), ("color", "red")],
            stamp_ms=1700000009876,
        )
        self.assertEqual(sku, "VEG-TOM-123456-SILA-CORE-9876")


class ProductServiceTests(TestCase):
    def setUp(self):
        self.category = Category.objects.create(name="Vegetables", slug="vegetables")
        self.size = VariationType.objects.create(name="size", display_name="Size", sort_order=1)
        self.small = VariationOption.objects.create(variation_type=self.size, name="small", display_name="Small")
        self.large = VariationOption.objects.create(variation_type=self.size, name="large", display_name="Large")

    def test_create_product_generates_sku_and_slug(self):
        product = ProductService.create_product(name="Tomatoes", price=Decimal("1000"), category_id=self.category.id)
        self.assertRegex(product.sku, r"^VEG-TOM-\d{6}$")
        self.assertEqual(product.slug, "tomatoes")

        second = ProductService.create_product(name="Tomatoes", price=Decimal("900"))
        self.assertEqual(second.slug, "tomatoes-1")
        self.assertTrue(second.sku.startswith("GEN-TOM-"))

    def test_duplicate_sku_rejected(self):
        ProductService.create_product(name="Pepper", price=Decimal("10"), sku="PEP-1")
        with self.assertRaises(SkuTakenError):
            ProductService.create_product(name="Pepper 2", price=Decimal("10"), sku="PEP-1")

    def test_create_with_variations_keeps_single_default(self):
        product = ProductService.create_product(
            name="Yam",
            price=Decimal("2000"),
            variations=[
                VariationInput(option_ids=[self.small.id], stock_quantity=3, is_default=True),
                VariationInput(option_ids=[self.large.id], price=Decimal("3500"), stock_quantity=4, is_default=True),
            ],
        )
        variations = list(ProductVariation.objects.filter(product=product).order_by("id"))
        self.assertEqual(len(variations), 2)
        self.assertEqual([v.is_default for v in variations], [False, True])
        self.assertTrue(re.match(rf"^{re.escape(product.sku)}-SISM-\d{{4}}$", variations[0].sku))
        self.assertEqual(variations[0].effective_price, Decimal("2000"))
        self.assertEqual(variations[1].effective_price, Decimal("3500"))
        self.assertEqual(variations[1].display_name, "Large")

    def test_failed_variation_rolls_back_product(self):
        with self.assertRaises(Exception):
            ProductService.create_product(
                name="Garri",
                price=Decimal("500"),
                variations=[VariationInput(option_ids=[999999])],
            )
        self.assertFalse(Product.objects.filter(name="Garri").exists())


class InventoryServiceTests(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Rice", slug="rice", sku="RICE", price=Decimal("100"), stock_quantity=3)

    def test_decrement_is_conditional(self):
        InventoryService.decrement(product=self.product, quantity=2)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 1)

        with self.assertRaises(InsufficientStockError) as ctx:
            InventoryService.decrement(product=self.product, quantity=2)
        self.assertEqual(ctx.exception.available, 1)
        self.assertIn("Available: 1", ctx.exception.message)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 1)

    def test_restore_adds_back(self):
        InventoryService.restore(product_id=self.product.id, quantity=4)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 7)


class CatalogApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        User = get_user_model()
        self.manager = User.objects.create_user(username="manager@example.com", email="manager@example.com", password="x")
        AccountProfile.objects.create(user=self.manager, role="manager")
        self.customer = User.objects.create_user(username="cust@example.com", email="cust@example.com", password="x")
        AccountProfile.objects.create(user=self.customer, role="customer")

        Product.objects.create(name="Active", slug="active", sku="A-1", price=Decimal("10"), stock_quantity=10)
        Product.objects.create(name="Hidden", slug="hidden", sku="H-1", price=Decimal("10"), status="draft")

    def test_public_list_shows_only_active_products(self):
        response = self.client.get("/api/products/")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        names = [p["name"] for p in payload["data"]["products"]]
        self.assertEqual(names, ["Active"])
        self.assertEqual(payload["data"]["pagination"]["total_items"], 1)
        self.assertEqual(payload["data"]["products"][0]["stock_status"], "in_stock")

    def test_public_detail_hides_draft(self):
        hidden = Product.objects.get(sku="H-1")
        response = self.client.get(f"/api/products/{hidden.id}/")
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.json()["success"])

    def test_admin_create_requires_permission(self):
        response = self.client.post("/api/admin/products/", data={"name": "X", "price": "10"}, format="json")
        self.assertEqual(response.status_code, 401)

        self.client.force_authenticate(user=self.customer)
        response = self.client.post("/api/admin/products/", data={"name": "X", "price": "10"}, format="json")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], "You do not have permission to perform this action")

    def test_manager_creates_and_updates_product(self):
        self.client.force_authenticate(user=self.manager)
        response = self.client.post(
            "/api/admin/products/",
            data={"name": "Plantain", "price": "1500.00", "stock_quantity": 4},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        product = response.json()["data"]["product"]
        self.assertEqual(product["stock_status"], "low_stock")

        response = self.client.patch(
            f"/api/admin/products/{product['id']}/",
            data={"sale_price": "1200.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["product"]["effective_price"], "1200.00")

    def test_validation_errors_use_envelope(self):
        self.client.force_authenticate(user=self.manager)
        response = self.client.post("/api/admin/products/", data={"price": "abc"}, format="json")
        self.assertEqual(response.status_code, 400)
        payload = response.json()
        self.assertEqual(payload["message"], "Validation failed")
        fields = {issue["field"] for issue in payload["errors"]}
        self.assertIn("name", fields)
        self.assertIn("price", fields)

    def test_delete_unordered_product_removes_row(self):
        self.client.force_authenticate(user=self.manager)
        product = Product.objects.get(sku="A-1")
        response = self.client.delete(f"/api/admin/products/{product.id}/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["outcome"], "deleted")
        self.assertFalse(Product.objects.filter(pk=product.id).exists())
