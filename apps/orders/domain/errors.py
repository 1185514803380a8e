from __future__ import annotations

from apps.core.domain.errors import AccessDeniedError, BusinessRuleError, NotFoundError, StoreValidationError


class OrderValidationError(StoreValidationError):
    pass


class OrderNotFoundError(NotFoundError):
    default_message = "Order not found"


class PriceMismatchError(BusinessRuleError):
    def __init__(self, *, product_name: str, submitted, current) -> None:
        self.product_name = product_name
        self.submitted = submitted
        self.current = current
        super().__init__(
            f"Price for {product_name} has changed from {submitted} to {current}. Please review your cart.",
            field="items",
        )


class InvalidStatusTransitionError(BusinessRuleError):
    def __init__(self, *, current: str, new: str) -> None:
        self.current = current
        self.new = new
        super().__init__(f"Cannot change order status from {current} to {new}", field="status")


class OrderNotCancellableError(BusinessRuleError):
    default_message = "Only pending or confirmed orders can be cancelled"


class OrderAccessDeniedError(AccessDeniedError):
    pass
