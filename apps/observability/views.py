from __future__ import annotations

import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.views.decorators.http import require_GET

logger = logging.getLogger("freshcounty.request")


@require_GET
def healthz(request):
    return JsonResponse({"status": "ok"})


@require_GET
def readyz(request):
    """Readiness probe: the process is up and the database answers a round-trip."""
    db_ok = True
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        logger.exception("readiness check failed: database unreachable")
        db_ok = False

    payload = {"status": "ok" if db_ok else "unavailable", "db": db_ok}
    return JsonResponse(payload, status=200 if db_ok else 503)
