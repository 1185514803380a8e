"""
DRF exception handler producing the `{success, message, errors?}` envelope.

Domain errors (`StoreError` subclasses) carry their own HTTP status; DRF's own
exceptions keep their status and headers and only have the body rewritten.
"""

from __future__ import annotations

import logging

from rest_framework import exceptions, status
from rest_framework.views import exception_handler as drf_exception_handler

from apps.core.domain.errors import AccessDeniedError, StoreError
from apps.core.interfaces.api.responses import error_response

logger = logging.getLogger("freshcounty.request")


def _flatten_errors(detail, prefix: str = "") -> list[dict]:
    if isinstance(detail, dict):
        issues: list[dict] = []
        for key, value in detail.items():
            name = key if key != "non_field_errors" else ""
            path = f"{prefix}.{name}" if prefix and name else (name or prefix)
            issues.extend(_flatten_errors(value, path))
        return issues
    if isinstance(detail, list):
        if all(not isinstance(item, (dict, list)) for item in detail):
            return [{"field": prefix or None, "message": str(item)} for item in detail]
        issues = []
        for index, item in enumerate(detail):
            path = f"{prefix}.{index}" if prefix else str(index)
            issues.extend(_flatten_errors(item, path))
        return issues
    return [{"field": prefix or None, "message": str(detail)}]


def store_exception_handler(exc, context):
    view = context.get("view")
    view_name = type(view).__name__ if view is not None else ""

    if isinstance(exc, StoreError):
        if exc.http_status >= 500:
            logger.exception("store_error", extra={"view": view_name})
        return error_response(
            message=exc.message,
            field=exc.field,
            errors=exc.errors,
            http_status=exc.http_status,
        )

    response = drf_exception_handler(exc, context)
    if response is None:
        logger.exception("unhandled_api_error", extra={"view": view_name})
        return error_response(message="Internal server error", http_status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            "success": False,
            "message": "Validation failed",
            "errors": _flatten_errors(exc.detail),
        }
    elif isinstance(exc, exceptions.PermissionDenied):
        response.data = {"success": False, "message": AccessDeniedError.default_message}
    else:
        detail = getattr(exc, "detail", None)
        response.data = {"success": False, "message": str(detail) if detail else str(exc)}
    return response
