from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient

from apps.cart.application.services.cart_identity import CartIdentity
from apps.cart.application.services.cart_service import CartService
from apps.cart.domain.errors import CartIdentityError, CartItemNotFoundError
from apps.cart.models import CartItem
from apps.catalog.domain.errors import InsufficientStockError
from apps.catalog.models import Product
from apps.coupons.domain.errors import CouponError
from apps.coupons.models import Coupon


def make_product(name="Tomatoes", price="1000", stock=10, **extra):
    slug = name.lower().replace(" ", "-")
    return Product.objects.create(
        name=name, slug=slug, sku=f"GEN-{slug[:3].upper()}-000001-{slug}", price=Decimal(price), stock_quantity=stock, **extra
    )


class CartServiceTests(TestCase):
    def setUp(self):
        self.product = make_product()
        self.guest = CartIdentity(session_id="guest-session-1")

    def test_identity_needs_exactly_one_owner(self):
        with self.assertRaises(CartIdentityError):
            CartIdentity()
        user = get_user_model().objects.create_user(username="u", email="u@example.com", password="pw")
        with self.assertRaises(CartIdentityError):
            CartIdentity(user=user, session_id="abc")

    def test_owner_check_constraint(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                CartItem.objects.create(product=self.product, quantity=1, price=Decimal("1"))

    def test_adding_same_product_merges_quantities(self):
        CartService.add_item(self.guest, product_id=self.product.pk, quantity=2)
        item = CartService.add_item(self.guest, product_id=self.product.pk, quantity=3)
        self.assertEqual(item.quantity, 5)
        self.assertEqual(CartItem.objects.count(), 1)

    def test_add_refreshes_price_snapshot_to_sale_price(self):
        CartService.add_item(self.guest, product_id=self.product.pk, quantity=1)
        self.product.sale_price = Decimal("800")
        self.product.save()
        item = CartService.add_item(self.guest, product_id=self.product.pk, quantity=1)
        self.assertEqual(item.price, Decimal("800.00"))

    def test_add_beyond_stock_fails(self):
        with self.assertRaises(InsufficientStockError):
            CartService.add_item(self.guest, product_id=self.product.pk, quantity=11)

    def test_unmanaged_stock_is_not_checked(self):
        bread = make_product("Bread", stock=0, manage_stock=False)
        item = CartService.add_item(self.guest, product_id=bread.pk, quantity=4)
        self.assertEqual(item.quantity, 4)

    def test_view_uses_pricing_and_hides_inactive_products(self):
        CartService.add_item(self.guest, product_id=self.product.pk, quantity=2)
        gone = make_product("Gone")
        CartService.add_item(self.guest, product_id=gone.pk, quantity=1)
        Product.objects.filter(pk=gone.pk).update(status=Product.STATUS_INACTIVE)

        cart = CartService.view(self.guest)
        self.assertEqual(cart.item_count, 2)
        self.assertEqual(cart.totals.subtotal, Decimal("2000.00"))
        self.assertEqual(cart.totals.total_amount, Decimal("3650.00"))

    def test_items_are_scoped_to_owner(self):
        item = CartService.add_item(self.guest, product_id=self.product.pk, quantity=1)
        other = CartIdentity(session_id="guest-session-2")
        with self.assertRaises(CartItemNotFoundError):
            CartService.update_quantity(other, item_id=item.pk, quantity=2)
        with self.assertRaises(CartItemNotFoundError):
            CartService.remove_item(other, item_id=item.pk)

    def test_coupon_preview_does_not_record_usage(self):
        coupon = Coupon.objects.create(code="TENOFF", name="Ten", type="fixed_amount", discount_value=Decimal("10"))
        CartService.add_item(self.guest, product_id=self.product.pk, quantity=1)
        _, discount, totals = CartService.preview_coupon(self.guest, code="tenoff")
        self.assertEqual(discount.discount_amount, Decimal("10.00"))
        self.assertEqual(totals.total_amount, Decimal("2565.00"))
        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 0)

    def test_coupon_preview_rejects_unknown_code(self):
        CartService.add_item(self.guest, product_id=self.product.pk, quantity=1)
        with self.assertRaises(CouponError):
            CartService.preview_coupon(self.guest, code="NOPE")


class CartApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.product = make_product()

    def test_guest_gets_session_cookie_and_keeps_cart(self):
        res = self.client.post("/api/cart/items/", {"product_id": self.product.pk, "quantity": 2}, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertIn("cart_session", res.cookies)
        session_id = res.cookies["cart_session"].value

        res = self.client.get("/api/cart/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["item_count"], 2)
        self.assertNotIn("cart_session", res.cookies)
        self.assertTrue(CartItem.objects.filter(session_id=session_id).exists())

    def test_authenticated_cart_belongs_to_user(self):
        user = get_user_model().objects.create_user(username="ada@example.com", email="ada@example.com", password="pw")
        self.client.force_authenticate(user)
        res = self.client.post("/api/cart/items/", {"product_id": self.product.pk}, format="json")
        self.assertEqual(res.status_code, 201)
        item = CartItem.objects.get()
        self.assertEqual(item.user, user)
        self.assertEqual(item.session_id, "")

    def test_update_remove_and_clear(self):
        res = self.client.post("/api/cart/items/", {"product_id": self.product.pk}, format="json")
        item_id = res.data["data"]["item"]["id"]

        res = self.client.patch(f"/api/cart/items/{item_id}/", {"quantity": 4}, format="json")
        self.assertEqual(res.data["data"]["item"]["quantity"], 4)

        res = self.client.delete(f"/api/cart/items/{item_id}/")
        self.assertEqual(res.data["data"]["item_count"], 0)

        self.client.post("/api/cart/items/", {"product_id": self.product.pk}, format="json")
        res = self.client.delete("/api/cart/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(CartItem.objects.count(), 0)

    def test_missing_item_returns_404_envelope(self):
        res = self.client.patch("/api/cart/items/999/", {"quantity": 1}, format="json")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data, {"success": False, "message": "Cart item not found"})

    def test_calculate_arbitrary_items(self):
        res = self.client.post(
            "/api/cart/calculate/",
            {"items": [{"price": "100.00", "quantity": 1}]},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        totals = res.data["data"]["totals"]
        self.assertEqual(totals["tax_amount"], Decimal("7.50"))
        self.assertEqual(totals["shipping_cost"], Decimal("1500.00"))
