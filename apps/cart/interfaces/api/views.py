from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from apps.cart.application.services.cart_identity import attach_session_cookie, resolve_cart_identity
from apps.cart.application.services.cart_service import CartService
from apps.cart.interfaces.api.serializers import (
    AddCartItemSerializer,
    ApplyCouponSerializer,
    CalculateSerializer,
    CartItemSerializer,
    UpdateCartItemSerializer,
)
from apps.core.interfaces.api.responses import success_response


def _cart_payload(cart) -> dict:
    return {
        "items": CartItemSerializer(cart.items, many=True).data,
        "totals": cart.totals.as_dict(),
        "item_count": cart.item_count,
    }


class _CartView(APIView):
    """Open to guests; the identity is resolved per request."""

    permission_classes = [AllowAny]

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.identity = resolve_cart_identity(request)

    def finalize_response(self, request, response, *args, **kwargs):
        response = super().finalize_response(request, response, *args, **kwargs)
        identity = getattr(self, "identity", None)
        if identity is not None:
            attach_session_cookie(response, identity)
        return response


class CartAPI(_CartView):
    def get(self, request):
        return success_response(message="Cart retrieved", data=_cart_payload(CartService.view(self.identity)))

    def delete(self, request):
        CartService.clear(self.identity)
        return success_response(message="Cart cleared")


class CartItemsAPI(_CartView):
    def post(self, request):
        serializer = AddCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        item = CartService.add_item(
            self.identity,
            product_id=data["product_id"],
            quantity=data["quantity"],
            variation_id=data.get("variation_id"),
            attributes=data["attributes"],
        )
        return success_response(
            message="Item added to cart",
            data={"item": CartItemSerializer(item).data, **_cart_payload(CartService.view(self.identity))},
            http_status=status.HTTP_201_CREATED,
        )


class CartItemDetailAPI(_CartView):
    def patch(self, request, item_id: int):
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = CartService.update_quantity(self.identity, item_id=item_id, quantity=serializer.validated_data["quantity"])
        return success_response(
            message="Cart item updated",
            data={"item": CartItemSerializer(item).data, **_cart_payload(CartService.view(self.identity))},
        )

    def delete(self, request, item_id: int):
        CartService.remove_item(self.identity, item_id=item_id)
        return success_response(message="Item removed from cart", data=_cart_payload(CartService.view(self.identity)))


class CartApplyCouponAPI(_CartView):
    def post(self, request):
        serializer = ApplyCouponSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        cart, discount, totals = CartService.preview_coupon(
            self.identity, code=data["code"], shipping_override=data["delivery_cost"]
        )
        return success_response(
            message="Coupon applied",
            data={
                "coupon": {"code": discount.coupon.code, "name": discount.coupon.name, "type": discount.coupon.type},
                "items": CartItemSerializer(cart.items, many=True).data,
                "totals": totals.as_dict(),
                "item_count": cart.item_count,
            },
        )


class CartCalculateAPI(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = CalculateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        totals = CartService.calculate(data["items"], shipping_override=data["delivery_cost"])
        return success_response(message="Totals calculated", data={"totals": totals.as_dict()})
