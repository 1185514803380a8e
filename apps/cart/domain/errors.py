from __future__ import annotations

from apps.core.domain.errors import NotFoundError, StoreValidationError


class CartValidationError(StoreValidationError):
    pass


class CartItemNotFoundError(NotFoundError):
    default_message = "Cart item not found"


class CartIdentityError(StoreValidationError):
    default_message = "Cart session could not be determined"
