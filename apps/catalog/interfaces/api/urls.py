from django.urls import path

from .views import (
    AdminProductDetailAPI,
    AdminProductListAPI,
    AdminVariationOptionAPI,
    AdminVariationTypeAPI,
    CategoryListAPI,
    ProductDetailAPI,
    ProductListAPI,
)

urlpatterns = [
    path("products/", ProductListAPI.as_view(), name="api_products"),
    path("products/<int:product_id>/", ProductDetailAPI.as_view(), name="api_product_detail"),
    path("categories/", CategoryListAPI.as_view(), name="api_categories"),
    path("admin/products/", AdminProductListAPI.as_view(), name="api_admin_products"),
    path("admin/products/<int:product_id>/", AdminProductDetailAPI.as_view(), name="api_admin_product_detail"),
    path("admin/variation-types/", AdminVariationTypeAPI.as_view(), name="api_admin_variation_types"),
    path("admin/variation-options/", AdminVariationOptionAPI.as_view(), name="api_admin_variation_options"),
]
