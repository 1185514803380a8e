from __future__ import annotations

from apps.core.domain.errors import BusinessRuleError, ConflictError, NotFoundError, StoreValidationError


class CouponError(BusinessRuleError):
    """A coupon could not be applied. `reason` is one of `CouponReason`."""

    def __init__(self, reason: str, message: str) -> None:
        self.reason = str(reason)
        super().__init__(message, field="coupon_code")


class CouponNotFoundError(NotFoundError):
    default_message = "Coupon not found"


class CouponValidationError(StoreValidationError):
    pass


class CouponCodeTakenError(ConflictError):
    default_message = "Coupon code already exists"


class CouponInUseError(BusinessRuleError):
    default_message = "Cannot delete coupon that has been used. Consider deactivating it instead."
