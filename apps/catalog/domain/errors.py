from __future__ import annotations

from apps.core.domain.errors import BusinessRuleError, ConflictError, NotFoundError, StoreValidationError


class CatalogValidationError(StoreValidationError):
    pass


class ProductNotFoundError(NotFoundError):
    default_message = "Product not found"

    def __init__(self, message: str | None = None, *, product_id=None, **kwargs) -> None:
        self.product_id = product_id
        if message is None and product_id is not None:
            message = f"Product {product_id} not found or not available"
        super().__init__(message, **kwargs)


class VariationNotFoundError(NotFoundError):
    default_message = "Product variation not found"


class CategoryNotFoundError(NotFoundError):
    default_message = "Category not found"


class SkuTakenError(ConflictError):
    default_message = "SKU already exists"


class VariationTypeExistsError(ConflictError):
    default_message = "Variation type already exists"


class InsufficientStockError(BusinessRuleError):
    def __init__(self, *, product_name: str, available: int, requested: int | None = None) -> None:
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(f"Insufficient stock for {product_name}. Available: {available}")
