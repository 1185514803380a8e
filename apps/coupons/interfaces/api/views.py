from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from apps.accounts.domain.permissions import Permission
from apps.accounts.interfaces.api.permissions import MethodPermissionMixin
from apps.core.domain.money import ZERO, round_money
from apps.core.interfaces.api.pagination import page_params, paginate
from apps.core.interfaces.api.responses import success_response
from apps.coupons.application.services.coupon_admin_service import CouponAdminService, get_coupon
from apps.coupons.application.services.coupon_validator import CouponValidator
from apps.coupons.interfaces.api.serializers import (
    CouponSerializer,
    CouponValidateSerializer,
    CouponWriteSerializer,
)
from apps.coupons.models import Coupon

SORT_FIELDS = {"created_at", "code", "name", "discount_value", "used_count", "expires_at"}


class CouponValidateAPI(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CouponValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = CouponValidator.validate(
            data["code"],
            data["order_amount"],
            request.user.pk,
            data.get("shipping_cost", ZERO),
        )
        coupon = result.coupon
        return success_response(
            message="Coupon validated successfully",
            data={
                "coupon": {
                    "id": coupon.id,
                    "code": coupon.code,
                    "name": coupon.name,
                    "type": coupon.type,
                    "discount_value": coupon.discount_value,
                },
                "original_amount": round_money(data["order_amount"]),
                "discount_amount": result.discount_amount,
                "final_amount": round_money(max(data["order_amount"] - result.discount_amount, ZERO)),
            },
        )


class AdminCouponListAPI(MethodPermissionMixin, APIView):
    method_permissions = {
        "GET": (Permission.VIEW_COUPONS,),
        "POST": (Permission.CREATE_COUPONS,),
    }

    def get(self, request):
        params = request.query_params
        queryset = Coupon.objects.select_related("created_by")

        search = (params.get("search") or "").strip()
        if search:
            queryset = queryset.filter(
                Q(code__icontains=search) | Q(name__icontains=search) | Q(description__icontains=search)
            )
        if params.get("type"):
            queryset = queryset.filter(type=params["type"])
        if params.get("is_active") in ("true", "false"):
            queryset = queryset.filter(is_active=params["is_active"] == "true")

        sort_by = params.get("sort_by") if params.get("sort_by") in SORT_FIELDS else "created_at"
        descending = (params.get("sort_order") or "DESC").upper() != "ASC"
        queryset = queryset.order_by(f"-{sort_by}" if descending else sort_by, "-id")

        page, limit = page_params(request)
        result = paginate(queryset, page=page, limit=limit)
        return success_response(
            message="Coupons retrieved successfully",
            data={"coupons": CouponSerializer(result.items, many=True).data, "pagination": result.meta},
        )

    def post(self, request):
        serializer = CouponWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        coupon = CouponAdminService.create(values=serializer.validated_data, created_by=request.user)
        return success_response(
            message="Coupon created successfully",
            data={"coupon": CouponSerializer(coupon).data},
            http_status=status.HTTP_201_CREATED,
        )


class AdminCouponDetailAPI(MethodPermissionMixin, APIView):
    method_permissions = {
        "GET": (Permission.VIEW_COUPONS,),
        "PATCH": (Permission.EDIT_COUPONS,),
        "PUT": (Permission.EDIT_COUPONS,),
        "DELETE": (Permission.DELETE_COUPONS,),
    }

    def get(self, request, coupon_id: int):
        coupon = get_coupon(coupon_id)
        return success_response(
            message="Coupon retrieved successfully",
            data={"coupon": CouponSerializer(coupon).data, "usage_stats": CouponAdminService.usage_stats(coupon)},
        )

    def patch(self, request, coupon_id: int):
        coupon = get_coupon(coupon_id)
        serializer = CouponWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        coupon = CouponAdminService.update(coupon=coupon, changes=dict(serializer.validated_data))
        return success_response(message="Coupon updated successfully", data={"coupon": CouponSerializer(coupon).data})

    put = patch

    def delete(self, request, coupon_id: int):
        coupon = get_coupon(coupon_id)
        CouponAdminService.delete(coupon=coupon)
        return success_response(message="Coupon deleted successfully")


class AdminCouponStatsAPI(MethodPermissionMixin, APIView):
    method_permissions = {"GET": (Permission.VIEW_COUPONS,)}

    def get(self, request):
        try:
            days = int(request.query_params.get("period", 30))
        except (TypeError, ValueError):
            days = 30
        days = min(max(days, 1), 365)
        return success_response(
            message="Coupon statistics retrieved successfully",
            data=CouponAdminService.period_stats(days=days),
        )
