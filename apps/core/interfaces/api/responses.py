from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response


def success_response(*, message: str, data=None, http_status: int = status.HTTP_200_OK, **extra) -> Response:
    payload: dict = {"success": True, "message": message}
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return Response(payload, status=http_status)


def error_response(
    *,
    message: str,
    field: str | None = None,
    errors: list[dict] | None = None,
    http_status: int = status.HTTP_400_BAD_REQUEST,
) -> Response:
    payload: dict = {"success": False, "message": message}
    if field:
        payload["field"] = field
    if errors:
        payload["errors"] = errors
    return Response(payload, status=http_status)
