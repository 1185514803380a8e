from __future__ import annotations

from django.db.models import Count, Q
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.accounts.domain.permissions import Permission
from apps.accounts.interfaces.api.permissions import require_permission
from apps.core.interfaces.api.pagination import page_params, paginate
from apps.core.interfaces.api.responses import success_response
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
from apps.orders.domain.errors import OrderNotFoundError
from apps.orders.interfaces.api.serializers import (
    AdminOrderSerializer,
    BulkStatusSerializer,
    CancelOrderSerializer,
    CreateOrderSerializer,
    OrderDetailSerializer,
    OrderSerializer,
    UpdateStatusSerializer,
)
from apps.orders.models import Order
from apps.system.application.services.store_settings_service import StoreSettingsService


def _own_order(user, order_id) -> Order:
    order = Order.objects.filter(pk=order_id, user=user).prefetch_related("items").first()
    if order is None:
        raise OrderNotFoundError()
    return order


class OrderListCreateAPI(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        queryset = Order.objects.filter(user=request.user).annotate(item_count=Count("items"))
        status_filter = request.query_params.get("status")
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        page, limit = page_params(request, default_limit=10)
        result = paginate(queryset.order_by("-created_at"), page=page, limit=limit)
        return success_response(
            message="Orders retrieved",
            data={"orders": OrderSerializer(result.items, many=True).data, "pagination": result.meta},
        )

    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        placed = CreateOrderUseCase.execute(
            CreateOrderCommand(
                user=request.user,
                items=[OrderLineInput(**item) for item in data["items"]],
                shipping_address=dict(data["shipping_address"]),
                payment_method=data["payment_method"],
                coupon_code=data["coupon_code"],
                delivery_type=data["delivery_type"],
                delivery_cost=data["delivery_cost"],
                notes=data["notes"],
            )
        )
        payload = {"order": OrderDetailSerializer(placed.order).data}
        if placed.coupon_error is not None:
            payload["coupon_error"] = {"reason": placed.coupon_error.reason, "message": placed.coupon_error.message}
        return success_response(
            message="Order created successfully",
            data=payload,
            http_status=status.HTTP_201_CREATED,
        )


class OrderDetailAPI(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, order_id):
        order = _own_order(request.user, order_id)
        return success_response(
            message="Order retrieved",
            data={
                "order": OrderDetailSerializer(order).data,
                "status_history": OrderStatusHistoryQuery.for_order(order),
            },
        )


class OrderCancelAPI(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, order_id):
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change = CancelOrderUseCase.execute(
            CancelOrderCommand(user=request.user, order_id=order_id, reason=serializer.validated_data["reason"])
        )
        return success_response(
            message="Order cancelled successfully",
            data={"order": OrderSerializer(change.order).data},
        )


class AdminOrderListAPI(APIView):
    permission_classes = [require_permission(Permission.VIEW_ORDERS)]

    def get(self, request):
        params = request.query_params
        queryset = Order.objects.select_related("user").annotate(item_count=Count("items"))
        if params.get("status"):
            queryset = queryset.filter(status=params["status"])
        if params.get("payment_status"):
            queryset = queryset.filter(payment_status=params["payment_status"])
        search = (params.get("search") or "").strip()
        if search:
            queryset = queryset.filter(
                Q(order_number__icontains=search)
                | Q(user__email__icontains=search)
                | Q(user__first_name__icontains=search)
                | Q(user__last_name__icontains=search)
            )
        page, limit = page_params(request)
        result = paginate(queryset.order_by("-created_at"), page=page, limit=limit)
        return success_response(
            message="Orders retrieved",
            data={"orders": AdminOrderSerializer(result.items, many=True).data, "pagination": result.meta},
        )


class AdminOrderDetailAPI(APIView):
    permission_classes = [require_permission(Permission.VIEW_ORDERS)]

    def get(self, request, order_id):
        order = Order.objects.select_related("user", "coupon").prefetch_related("items").filter(pk=order_id).first()
        if order is None:
            raise OrderNotFoundError()

        data = AdminOrderSerializer(order).data
        data["items"] = OrderDetailSerializer(order).data["items"]
        data["shipping_address"] = order.shipping_address
        data["notes"] = order.notes
        data["tax_rate"] = StoreSettingsService.load().tax_rate
        usage = order.coupon_usages.select_related("coupon").first()
        data["coupon_usage"] = (
            {
                "code": usage.coupon.code,
                "name": usage.coupon.name,
                "type": usage.coupon.type,
                "discount_amount": usage.discount_amount,
            }
            if usage
            else None
        )
        return success_response(
            message="Order retrieved",
            data={"order": data, "status_history": OrderStatusHistoryQuery.for_order(order)},
        )


class AdminOrderStatusAPI(APIView):
    permission_classes = [require_permission(Permission.UPDATE_ORDER_STATUS)]

    def patch(self, request, order_id):
        serializer = UpdateStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        change = UpdateOrderStatusUseCase.execute(
            UpdateOrderStatusCommand(
                order_id=order_id,
                new_status=data["status"],
                notes=data["notes"],
                tracking_number=data["tracking_number"] or None,
                actor=request.user,
                notify_customer=data["notify_customer"],
            )
        )
        return success_response(
            message="Order status updated successfully",
            data={
                "order": AdminOrderSerializer(change.order).data,
                "previous_status": change.previous_status,
            },
        )


class AdminOrderBulkStatusAPI(APIView):
    permission_classes = [require_permission(Permission.UPDATE_ORDER_STATUS)]

    def post(self, request):
        serializer = BulkStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = BulkUpdateOrderStatusUseCase.execute(
            BulkUpdateOrderStatusCommand(
                order_ids=data["order_ids"],
                new_status=data["status"],
                notes=data["notes"],
                actor=request.user,
            )
        )
        return success_response(
            message=f"{result.success_count} of {result.total_count} orders updated successfully",
            data=result.as_dict(),
        )


class AdminOrderHistoryAPI(APIView):
    permission_classes = [require_permission(Permission.VIEW_ORDERS)]

    def get(self, request, order_id):
        order = Order.objects.filter(pk=order_id).first()
        if order is None:
            raise OrderNotFoundError()
        return success_response(
            message="Order status history retrieved",
            data={"order_number": order.order_number, "history": OrderStatusHistoryQuery.for_order(order)},
        )
