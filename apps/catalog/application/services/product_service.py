from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from django.db import IntegrityError, transaction

from apps.catalog.application.services.identifiers import (
    generate_product_sku,
    generate_variation_sku,
    sku_taken,
    unique_slug,
)
from apps.catalog.domain.errors import (
    CatalogValidationError,
    CategoryNotFoundError,
    SkuTakenError,
    VariationNotFoundError,
    VariationTypeExistsError,
)
from apps.catalog.models import (
    Category,
    Product,
    ProductVariation,
    ProductVariationCombination,
    VariationOption,
    VariationType,
)

logger = logging.getLogger("freshcounty.catalog")

PRODUCT_FIELDS = (
    "name",
    "description",
    "short_description",
    "price",
    "sale_price",
    "stock_quantity",
    "manage_stock",
    "status",
    "featured",
)


@dataclass(frozen=True)
class VariationInput:
    option_ids: list[int] = field(default_factory=list)
    price: Decimal | None = None
    sale_price: Decimal | None = None
    stock_quantity: int = 0
    is_default: bool = False
    is_active: bool = True
    sku: str = ""
    id: int | None = None


class ProductService:
    @staticmethod
    def _validate_price(price) -> None:
        if price is None or price <= 0:
            raise CatalogValidationError("Price must be positive", field="price")

    @staticmethod
    def _validate_sale_price(sale_price) -> None:
        if sale_price is not None and sale_price < 0:
            raise CatalogValidationError("Sale price cannot be negative", field="sale_price")

    @staticmethod
    def _validate_stock(quantity) -> None:
        if quantity is not None and quantity < 0:
            raise CatalogValidationError("Stock quantity cannot be negative", field="stock_quantity")

    @staticmethod
    def _resolve_category(category_id) -> Category | None:
        if not category_id:
            return None
        category = Category.objects.filter(pk=category_id).first()
        if category is None:
            raise CategoryNotFoundError(field="category_id")
        return category

    @staticmethod
    def _resolve_options(option_ids: Iterable[int]) -> list[VariationOption]:
        ids = list(dict.fromkeys(option_ids))
        if not ids:
            raise CatalogValidationError("A variation needs at least one option", field="variations")
        options = list(VariationOption.objects.select_related("variation_type").filter(pk__in=ids))
        if len(options) != len(ids):
            raise CatalogValidationError("Unknown variation option", field="variations")
        type_ids = [option.variation_type_id for option in options]
        if len(set(type_ids)) != len(type_ids):
            raise CatalogValidationError("A variation takes one option per variation type", field="variations")
        return options

    @staticmethod
    def _save_variation(product: Product, item: VariationInput) -> ProductVariation:
        ProductService._validate_sale_price(item.sale_price)
        ProductService._validate_stock(item.stock_quantity)
        if item.price is not None and item.price <= 0:
            raise CatalogValidationError("Variation price must be positive", field="variations")

        options = ProductService._resolve_options(item.option_ids) if item.option_ids else None

        if item.id is not None:
            variation = ProductVariation.objects.filter(pk=item.id, product=product).first()
            if variation is None:
                raise VariationNotFoundError()
        else:
            if options is None:
                raise CatalogValidationError("A variation needs at least one option", field="variations")
            variation = ProductVariation(product=product)

        sku = (item.sku or "").strip()
        if sku:
            if sku_taken(sku, exclude_variation_id=variation.pk):
                raise SkuTakenError(field="sku")
            variation.sku = sku
        elif not variation.sku or options is not None:
            variation.sku = generate_variation_sku(product=product, options=options or list(variation.options.all()))

        variation.price = item.price
        variation.sale_price = item.sale_price
        variation.stock_quantity = item.stock_quantity
        variation.is_default = item.is_default
        variation.is_active = item.is_active
        variation.save()

        if options is not None:
            ProductVariationCombination.objects.filter(variation=variation).delete()
            ProductVariationCombination.objects.bulk_create(
                [ProductVariationCombination(variation=variation, option=option) for option in options]
            )
        if variation.is_default:
            ProductService.set_default_variation(product=product, variation=variation)
        return variation

    @staticmethod
    def set_default_variation(*, product: Product, variation: ProductVariation) -> None:
        ProductVariation.objects.filter(product=product).exclude(pk=variation.pk).update(is_default=False)
        if not variation.is_default:
            variation.is_default = True
            variation.save(update_fields=["is_default", "updated_at"])

    @staticmethod
    @transaction.atomic
    def create_product(
        *,
        name: str,
        price,
        sku: str = "",
        description: str = "",
        short_description: str = "",
        sale_price=None,
        stock_quantity: int = 0,
        manage_stock: bool = True,
        status: str = Product.STATUS_ACTIVE,
        featured: bool = False,
        category_id: int | None = None,
        variations: Iterable[VariationInput] | None = None,
    ) -> Product:
        name = (name or "").strip()
        if not name:
            raise CatalogValidationError("Product name is required", field="name")
        ProductService._validate_price(price)
        ProductService._validate_sale_price(sale_price)
        ProductService._validate_stock(stock_quantity)
        category = ProductService._resolve_category(category_id)

        sku = (sku or "").strip()
        if sku and sku_taken(sku):
            raise SkuTakenError(field="sku")
        if not sku:
            sku = generate_product_sku(name=name, category=category)
            logger.info("generated sku=%s for product name=%r", sku, name)

        try:
            product = Product.objects.create(
                name=name,
                slug=unique_slug(Product, name),
                sku=sku,
                description=description or "",
                short_description=short_description or "",
                price=price,
                sale_price=sale_price,
                stock_quantity=stock_quantity,
                manage_stock=manage_stock,
                status=status,
                featured=featured,
                category=category,
            )
        except IntegrityError as exc:
            raise SkuTakenError(field="sku") from exc

        for item in variations or []:
            ProductService._save_variation(product, item)

        logger.info("product created id=%s sku=%s", product.pk, product.sku)
        return product

    @staticmethod
    @transaction.atomic
    def update_product(
        *,
        product: Product,
        changes: dict,
        variations: Iterable[VariationInput] | None = None,
    ) -> Product:
        product = Product.objects.select_for_update().get(pk=product.pk)
        update_fields = []

        if "price" in changes:
            ProductService._validate_price(changes["price"])
        if "sale_price" in changes:
            ProductService._validate_sale_price(changes["sale_price"])
        if "stock_quantity" in changes:
            ProductService._validate_stock(changes["stock_quantity"])

        for name in PRODUCT_FIELDS:
            if name in changes:
                setattr(product, name, changes[name])
                update_fields.append(name)

        if "name" in changes:
            product.name = (changes["name"] or "").strip()
            if not product.name:
                raise CatalogValidationError("Product name is required", field="name")
            product.slug = unique_slug(Product, product.name, exclude_pk=product.pk)
            update_fields.append("slug")

        if "category_id" in changes:
            product.category = ProductService._resolve_category(changes["category_id"])
            update_fields.append("category")

        if "sku" in changes:
            sku = (changes["sku"] or "").strip()
            if not sku:
                sku = generate_product_sku(name=product.name, category=product.category)
            elif sku_taken(sku, exclude_product_id=product.pk):
                raise SkuTakenError(field="sku")
            product.sku = sku
            update_fields.append("sku")

        if update_fields:
            try:
                product.save(update_fields=[*dict.fromkeys(update_fields), "updated_at"])
            except IntegrityError as exc:
                raise SkuTakenError(field="sku") from exc

        for item in variations or []:
            ProductService._save_variation(product, item)

        logger.info("product updated id=%s fields=%s", product.pk, sorted(set(update_fields)))
        return product

    @staticmethod
    @transaction.atomic
    def delete_product(*, product: Product) -> str:
        """Ordered products are kept for order history and only deactivated."""
        if product.order_items.exists():
            Product.objects.filter(pk=product.pk).update(status=Product.STATUS_INACTIVE)
            logger.info("product deactivated id=%s (has orders)", product.pk)
            return "deactivated"
        product_id = product.pk
        product.delete()
        logger.info("product deleted id=%s", product_id)
        return "deleted"

    @staticmethod
    def create_variation_type(*, name: str, display_name: str = "", sort_order: int = 0) -> VariationType:
        name = (name or "").strip()
        if not name:
            raise CatalogValidationError("Variation type name is required", field="name")
        if VariationType.objects.filter(name__iexact=name).exists():
            raise VariationTypeExistsError(field="name")
        return VariationType.objects.create(name=name, display_name=display_name or name, sort_order=sort_order)

    @staticmethod
    def create_variation_option(
        *,
        variation_type_id: int,
        name: str,
        display_name: str = "",
        color_hex: str = "",
        sort_order: int = 0,
    ) -> VariationOption:
        variation_type = VariationType.objects.filter(pk=variation_type_id).first()
        if variation_type is None:
            raise CatalogValidationError("Unknown variation type", field="variation_type_id")
        name = (name or "").strip()
        if not name:
            raise CatalogValidationError("Option name is required", field="name")
        if VariationOption.objects.filter(variation_type=variation_type, name__iexact=name).exists():
            raise VariationTypeExistsError("Option already exists for this variation type", field="name")
        return VariationOption.objects.create(
            variation_type=variation_type,
            name=name,
            display_name=display_name or name,
            color_hex=color_hex or "",
            sort_order=sort_order,
        )
