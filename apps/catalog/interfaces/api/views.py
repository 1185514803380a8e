from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from apps.accounts.domain.permissions import Permission
from apps.accounts.interfaces.api.permissions import MethodPermissionMixin
from apps.catalog.application.services.product_service import ProductService, VariationInput
from apps.catalog.domain.errors import ProductNotFoundError
from apps.catalog.interfaces.api.serializers import (
    CategorySerializer,
    ProductDetailSerializer,
    ProductSerializer,
    ProductWriteSerializer,
    VariationOptionSerializer,
    VariationOptionWriteSerializer,
    VariationTypeSerializer,
    VariationTypeWriteSerializer,
)
from apps.catalog.models import Category, Product, VariationType
from apps.core.interfaces.api.pagination import page_params, paginate
from apps.core.interfaces.api.responses import success_response

SORT_FIELDS = {
    "newest": "-created_at",
    "oldest": "created_at",
    "price_asc": "price",
    "price_desc": "-price",
    "name": "name",
}


def _filter_products(queryset, params):
    search = (params.get("search") or "").strip()
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(description__icontains=search) | Q(sku__icontains=search)
        )
    category = (params.get("category") or "").strip()
    if category:
        queryset = queryset.filter(category_id=category) if category.isdigit() else queryset.filter(category__slug=category)
    if params.get("featured") in ("1", "true", "True"):
        queryset = queryset.filter(featured=True)
    return queryset.order_by(SORT_FIELDS.get(params.get("sort"), "-created_at"), "-id")


def _variation_inputs(raw) -> list[VariationInput] | None:
    if raw is None:
        return None
    return [VariationInput(**item) for item in raw]


class ProductListAPI(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        queryset = _filter_products(
            Product.objects.select_related("category").filter(status=Product.STATUS_ACTIVE),
            request.query_params,
        )
        page, limit = page_params(request)
        result = paginate(queryset, page=page, limit=limit)
        return success_response(
            message="Products retrieved",
            data={"products": ProductSerializer(result.items, many=True).data, "pagination": result.meta},
        )


class ProductDetailAPI(APIView):
    permission_classes = [AllowAny]

    def get(self, request, product_id: int):
        product = (
            Product.objects.select_related("category")
            .filter(pk=product_id, status=Product.STATUS_ACTIVE)
            .first()
        )
        if product is None:
            raise ProductNotFoundError()
        return success_response(message="Product retrieved", data={"product": ProductDetailSerializer(product).data})


class CategoryListAPI(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        categories = Category.objects.filter(is_active=True)
        return success_response(
            message="Categories retrieved",
            data={"categories": CategorySerializer(categories, many=True).data},
        )


class AdminProductListAPI(MethodPermissionMixin, APIView):
    method_permissions = {
        "GET": (Permission.VIEW_PRODUCTS,),
        "POST": (Permission.CREATE_PRODUCTS,),
    }

    def get(self, request):
        queryset = Product.objects.select_related("category")
        status_filter = request.query_params.get("status")
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        queryset = _filter_products(queryset, request.query_params)
        page, limit = page_params(request)
        result = paginate(queryset, page=page, limit=limit)
        return success_response(
            message="Products retrieved",
            data={"products": ProductSerializer(result.items, many=True).data, "pagination": result.meta},
        )

    def post(self, request):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        variations = _variation_inputs(data.pop("variations", None))

        product = ProductService.create_product(**data, variations=variations)
        return success_response(
            message="Product created successfully",
            data={"product": ProductDetailSerializer(product).data},
            http_status=status.HTTP_201_CREATED,
        )


class AdminProductDetailAPI(MethodPermissionMixin, APIView):
    method_permissions = {
        "GET": (Permission.VIEW_PRODUCTS,),
        "PATCH": (Permission.EDIT_PRODUCTS, Permission.MANAGE_INVENTORY),
        "DELETE": (Permission.DELETE_PRODUCTS,),
    }

    def _get_product(self, product_id: int) -> Product:
        product = Product.objects.select_related("category").filter(pk=product_id).first()
        if product is None:
            raise ProductNotFoundError()
        return product

    def get(self, request, product_id: int):
        product = self._get_product(product_id)
        return success_response(message="Product retrieved", data={"product": ProductDetailSerializer(product).data})

    def patch(self, request, product_id: int):
        product = self._get_product(product_id)
        serializer = ProductWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        changes = dict(serializer.validated_data)
        variations = _variation_inputs(changes.pop("variations", None))

        product = ProductService.update_product(product=product, changes=changes, variations=variations)
        return success_response(
            message="Product updated successfully",
            data={"product": ProductDetailSerializer(product).data},
        )

    def delete(self, request, product_id: int):
        product = self._get_product(product_id)
        outcome = ProductService.delete_product(product=product)
        if outcome == "deactivated":
            return success_response(
                message="Product has existing orders and was deactivated instead of deleted",
                data={"outcome": outcome},
            )
        return success_response(message="Product deleted successfully", data={"outcome": outcome})


class AdminVariationTypeAPI(MethodPermissionMixin, APIView):
    method_permissions = {
        "GET": (Permission.VIEW_PRODUCTS,),
        "POST": (Permission.CREATE_PRODUCTS, Permission.EDIT_PRODUCTS),
    }

    def get(self, request):
        types = VariationType.objects.prefetch_related("options")
        return success_response(
            message="Variation types retrieved",
            data={"variation_types": VariationTypeSerializer(types, many=True).data},
        )

    def post(self, request):
        serializer = VariationTypeWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        variation_type = ProductService.create_variation_type(**serializer.validated_data)
        return success_response(
            message="Variation type created",
            data={"variation_type": VariationTypeSerializer(variation_type).data},
            http_status=status.HTTP_201_CREATED,
        )


class AdminVariationOptionAPI(MethodPermissionMixin, APIView):
    method_permissions = {
        "POST": (Permission.CREATE_PRODUCTS, Permission.EDIT_PRODUCTS),
    }

    def post(self, request):
        serializer = VariationOptionWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        option = ProductService.create_variation_option(**serializer.validated_data)
        return success_response(
            message="Variation option created",
            data={"option": VariationOptionSerializer(option).data},
            http_status=status.HTTP_201_CREATED,
        )
