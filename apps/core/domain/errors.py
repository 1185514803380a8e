from __future__ import annotations


class StoreError(Exception):
    http_status = 400
    default_message = "Request failed."

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        errors: list[dict] | None = None,
    ):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.field = field
        self.errors = errors or []


class StoreValidationError(StoreError):
    http_status = 400
    default_message = "Validation failed"


class NotFoundError(StoreError):
    http_status = 404
    default_message = "Resource not found"


class AuthError(StoreError):
    http_status = 401
    default_message = "Authentication required"


class AccessDeniedError(StoreError):
    http_status = 403
    default_message = "You do not have permission to perform this action"


class ConflictError(StoreError):
    http_status = 409
    default_message = "Resource already exists"


class BusinessRuleError(StoreError):
    http_status = 400
    default_message = "The request violates a business rule."


class InternalError(StoreError):
    http_status = 500
    default_message = "Internal server error"
