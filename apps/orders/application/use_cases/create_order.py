from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import transaction

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.cart.models import CartItem
from apps.catalog.application.services.inventory_service import InventoryService
from apps.catalog.domain.errors import InsufficientStockError, ProductNotFoundError, VariationNotFoundError
from apps.catalog.models import Product, ProductVariation
from apps.core.domain.money import format_money, round_money, to_decimal
from apps.coupons.application.services.coupon_validator import CouponValidator
from apps.coupons.application.services.usage_recorder import CouponUsageRecorder
from apps.coupons.domain.errors import CouponError
from apps.notifications.application.services.dispatcher import notify_admins
from apps.notifications.domain.events import AdminAlertType
from apps.orders.domain.errors import OrderValidationError, PriceMismatchError
from apps.orders.domain.order_number import generate_order_number
from apps.orders.domain.pricing import LineItem, calculate_totals
from apps.orders.domain.status import OrderStatus, PaymentStatus
from apps.orders.models import Order, OrderItem, OrderStatusHistory
from apps.system.application.services.store_settings_service import StoreSettingsService

logger = logging.getLogger("freshcounty.orders")


@dataclass(frozen=True)
class OrderLineInput:
    product_id: int
    quantity: int
    price: Decimal | None = None
    variation_id: int | None = None
    variation_name: str = ""


@dataclass(frozen=True)
class CreateOrderCommand:
    user: object
    items: list[OrderLineInput]
    shipping_address: dict
    payment_method: str = ""
    coupon_code: str = ""
    delivery_type: str = Order.DELIVERY_STANDARD
    delivery_cost: Decimal | None = None
    notes: str = ""


@dataclass
class _Line:
    product: Product
    variation: ProductVariation | None
    quantity: int
    price: Decimal
    variation_name: str = ""


@dataclass(frozen=True)
class PlacedOrder:
    order: Order
    coupon_error: CouponError | None = None


def _unique_order_number() -> str:
    for _ in range(5):
        candidate = generate_order_number()
        if not Order.objects.filter(order_number=candidate).exists():
            return candidate
    return generate_order_number()


class CreateOrderUseCase:
    """Checkout: every write below commits together or not at all."""

    @staticmethod
    def _resolve_lines(items: list[OrderLineInput]) -> list[_Line]:
        if not items:
            raise OrderValidationError("Order must contain at least one item", field="items")
        for item in items:
            if int(item.quantity) <= 0:
                raise OrderValidationError("Quantity must be at least 1", field="items")

        # Lock in primary-key order so concurrent checkouts never wait on each other in a cycle.
        product_ids = sorted({int(item.product_id) for item in items})
        products = {
            product.pk: product
            for product in Product.objects.select_for_update()
            .filter(pk__in=product_ids, status=Product.STATUS_ACTIVE)
            .order_by("pk")
        }

        trust_client_price = getattr(settings, "ORDERS_TRUST_CLIENT_PRICE", True)
        requested: dict[int, int] = {}
        lines: list[_Line] = []
        for item in items:
            product = products.get(int(item.product_id))
            if product is None:
                raise ProductNotFoundError(product_id=item.product_id)

            variation = None
            if item.variation_id:
                variation = (
                    ProductVariation.objects.filter(pk=item.variation_id, product=product, is_active=True)
                    .select_related("product")
                    .first()
                )
                if variation is None:
                    raise VariationNotFoundError(field="items")

            server_price = round_money(variation.effective_price if variation else product.effective_price)
            if item.price is None:
                price = server_price
            else:
                price = round_money(to_decimal(item.price))
                if not trust_client_price and price != server_price:
                    raise PriceMismatchError(product_name=product.name, submitted=price, current=server_price)

            requested[product.pk] = requested.get(product.pk, 0) + int(item.quantity)
            if product.stock_quantity < requested[product.pk]:
                raise InsufficientStockError(
                    product_name=product.name,
                    available=product.stock_quantity,
                    requested=requested[product.pk],
                )

            variation_name = item.variation_name or (variation.display_name if variation else "")
            lines.append(
                _Line(
                    product=product,
                    variation=variation,
                    quantity=int(item.quantity),
                    price=price,
                    variation_name=variation_name,
                )
            )
        return lines

    @staticmethod
    @transaction.atomic
    def execute(cmd: CreateOrderCommand) -> PlacedOrder:
        if not isinstance(cmd.shipping_address, dict) or not cmd.shipping_address:
            raise OrderValidationError("Shipping address is required", field="shipping_address")

        store_settings = StoreSettingsService.load()
        lines = CreateOrderUseCase._resolve_lines(list(cmd.items))

        totals = calculate_totals(
            [LineItem(price=line.price, quantity=line.quantity) for line in lines],
            store_settings,
            shipping_override=cmd.delivery_cost,
        )

        coupon_discount, coupon_error = _apply_coupon(cmd, totals)
        if coupon_discount is not None:
            totals = totals.with_discount(coupon_discount.discount_amount)

        order = Order.objects.create(
            order_number=_unique_order_number(),
            user=cmd.user,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=cmd.payment_method or "",
            delivery_type=cmd.delivery_type or Order.DELIVERY_STANDARD,
            subtotal=totals.subtotal,
            tax_amount=totals.tax_amount,
            shipping_cost=totals.shipping_cost,
            discount_amount=totals.discount_amount,
            total_amount=totals.total_amount,
            shipping_address=cmd.shipping_address,
            coupon=coupon_discount.coupon if coupon_discount else None,
            coupon_code=coupon_discount.coupon.code if coupon_discount else "",
            notes=cmd.notes or "",
        )

        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product=line.product,
                    variation=line.variation,
                    product_name=line.product.name,
                    variation_name=line.variation_name,
                    quantity=line.quantity,
                    price=line.price,
                )
                for line in lines
            ]
        )

        for line in lines:
            InventoryService.decrement(product=line.product, quantity=line.quantity)

        if coupon_discount is not None:
            CouponUsageRecorder.record(
                coupon=coupon_discount.coupon,
                user=cmd.user,
                order=order,
                discount=coupon_discount.discount_amount,
            )

        OrderStatusHistory.objects.create(
            order=order,
            status=OrderStatus.PENDING.value,
            notes="Order created",
            changed_by=cmd.user,
        )

        CartItem.objects.filter(user=cmd.user).delete()

        logger.info(
            "order created order=%s user_id=%s items=%s total=%s",
            order.order_number,
            cmd.user.pk,
            len(lines),
            order.total_amount,
        )

        alert = _new_order_alert(order, cmd.user, store_settings.currency_symbol)
        transaction.on_commit(lambda: notify_admins(**alert))
        return PlacedOrder(order=order, coupon_error=coupon_error)


def _apply_coupon(cmd: CreateOrderCommand, totals):
    """A rejected coupon never blocks checkout; the order is placed at full price."""
    code = (cmd.coupon_code or "").strip()
    if not code:
        return None, None
    try:
        discount = CouponValidator.validate(
            code,
            totals.subtotal,
            cmd.user.pk,
            shipping_cost=totals.shipping_cost,
            for_update=True,
        )
    except CouponError as exc:
        logger.info("coupon ignored at checkout code=%s reason=%s user_id=%s", code, exc.reason, cmd.user.pk)
        return None, exc
    return discount, None


def _new_order_alert(order: Order, user, currency_symbol: str) -> dict:
    customer_name = AccountIdentityService.display_name(user)
    return {
        "title": "New Order Received",
        "message": (
            f"New order #{order.order_number} received from {customer_name}. "
            f"Total: {format_money(order.total_amount, currency_symbol)}. "
            "Payment pending - requires attention."
        ),
        "data": {
            "orderNumber": order.order_number,
            "customerEmail": getattr(user, "email", ""),
            "customerName": customer_name,
            "amount": str(order.total_amount),
            "status": order.status,
            "paymentStatus": order.payment_status,
        },
        "alert_type": AdminAlertType.NEW_ORDER,
    }
