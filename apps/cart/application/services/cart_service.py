from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction

from apps.cart.application.services.cart_identity import CartIdentity
from apps.cart.domain.errors import CartItemNotFoundError, CartValidationError
from apps.cart.models import CartItem
from apps.catalog.domain.errors import InsufficientStockError, ProductNotFoundError, VariationNotFoundError
from apps.catalog.models import Product, ProductVariation
from apps.core.domain.money import round_money
from apps.coupons.application.services.coupon_validator import CouponDiscount, CouponValidator
from apps.orders.domain.pricing import LineItem, Totals, calculate_totals
from apps.system.application.services.store_settings_service import StoreSettingsService

logger = logging.getLogger("freshcounty.cart")


@dataclass(frozen=True)
class CartView:
    items: list[CartItem]
    totals: Totals
    item_count: int


def _ensure_quantity(quantity) -> int:
    try:
        quantity = int(quantity)
    except (TypeError, ValueError) as exc:
        raise CartValidationError("Quantity must be a whole number", field="quantity") from exc
    if quantity < 1:
        raise CartValidationError("Quantity must be at least 1", field="quantity")
    return quantity


def _ensure_stock(product: Product, quantity: int) -> None:
    if product.manage_stock and product.stock_quantity < quantity:
        raise InsufficientStockError(product_name=product.name, available=product.stock_quantity, requested=quantity)


class CartService:
    @staticmethod
    def items(identity: CartIdentity) -> list[CartItem]:
        """Lines whose product is still sellable."""
        return list(
            CartItem.objects.filter(**identity.owner_filter(), product__status=Product.STATUS_ACTIVE)
            .select_related("product", "variation")
            .order_by("created_at", "id")
        )

    @staticmethod
    def view(identity: CartIdentity, *, shipping_override=None) -> CartView:
        items = CartService.items(identity)
        totals = calculate_totals(
            [LineItem(price=item.price, quantity=item.quantity) for item in items],
            StoreSettingsService.load(),
            shipping_override=shipping_override,
        )
        return CartView(items=items, totals=totals, item_count=sum(item.quantity for item in items))

    @staticmethod
    @transaction.atomic
    def add_item(
        identity: CartIdentity,
        *,
        product_id: int,
        quantity: int = 1,
        variation_id: int | None = None,
        attributes: dict | None = None,
    ) -> CartItem:
        quantity = _ensure_quantity(quantity)
        product = Product.objects.filter(pk=product_id, status=Product.STATUS_ACTIVE).first()
        if product is None:
            raise ProductNotFoundError(product_id=product_id)

        variation = None
        if variation_id:
            variation = ProductVariation.objects.filter(pk=variation_id, product=product, is_active=True).first()
            if variation is None:
                raise VariationNotFoundError(field="variation_id")

        price = round_money(variation.effective_price if variation else product.effective_price)
        existing = (
            CartItem.objects.select_for_update()
            .filter(**identity.owner_filter(), product=product, variation=variation)
            .first()
        )
        if existing is not None:
            new_quantity = existing.quantity + quantity
            _ensure_stock(product, new_quantity)
            existing.quantity = new_quantity
            existing.price = price
            if attributes:
                existing.attributes = attributes
            existing.save(update_fields=["quantity", "price", "attributes", "updated_at"])
            return existing

        _ensure_stock(product, quantity)
        item = CartItem.objects.create(
            **identity.owner_fields(),
            product=product,
            variation=variation,
            quantity=quantity,
            attributes=attributes or {},
            price=price,
        )
        logger.debug("cart item added item=%s product=%s quantity=%s", item.pk, product.pk, quantity)
        return item

    @staticmethod
    def _owned_item(identity: CartIdentity, item_id: int) -> CartItem:
        item = (
            CartItem.objects.select_related("product")
            .filter(pk=item_id, **identity.owner_filter())
            .first()
        )
        if item is None:
            raise CartItemNotFoundError()
        return item

    @staticmethod
    @transaction.atomic
    def update_quantity(identity: CartIdentity, *, item_id: int, quantity: int) -> CartItem:
        quantity = _ensure_quantity(quantity)
        item = CartService._owned_item(identity, item_id)
        _ensure_stock(item.product, quantity)
        item.quantity = quantity
        item.save(update_fields=["quantity", "updated_at"])
        return item

    @staticmethod
    def remove_item(identity: CartIdentity, *, item_id: int) -> None:
        CartService._owned_item(identity, item_id).delete()

    @staticmethod
    def clear(identity: CartIdentity) -> int:
        deleted, _ = CartItem.objects.filter(**identity.owner_filter()).delete()
        return deleted

    @staticmethod
    def preview_coupon(identity: CartIdentity, *, code: str, shipping_override=None) -> tuple[CartView, CouponDiscount, Totals]:
        """Coupon preview against the current cart; usage is only recorded at checkout."""
        cart = CartService.view(identity, shipping_override=shipping_override)
        if not cart.items:
            raise CartValidationError("Cart is empty", field="items")
        user_id = identity.user.pk if identity.user is not None else None
        discount = CouponValidator.validate(code, cart.totals.subtotal, user_id, shipping_cost=cart.totals.shipping_cost)
        return cart, discount, cart.totals.with_discount(discount.discount_amount)

    @staticmethod
    def calculate(items: list[dict], *, shipping_override=None) -> Totals:
        return calculate_totals(
            [LineItem(price=item["price"], quantity=item["quantity"]) for item in items],
            StoreSettingsService.load(),
            shipping_override=shipping_override,
        )
