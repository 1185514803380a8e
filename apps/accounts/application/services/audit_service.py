from __future__ import annotations

from apps.accounts.models import AccountAuditLog


def client_ip(request) -> str | None:
    value = request.META.get("HTTP_X_FORWARDED_FOR") or request.META.get("REMOTE_ADDR")
    if not value:
        return None
    return value.split(",")[0].strip() or None


class AccountAuditService:
    """Append-only trail of authentication events."""

    @staticmethod
    def record(*, request, action: str, user=None, metadata: dict | None = None) -> AccountAuditLog:
        return AccountAuditLog.objects.create(
            user_id=getattr(user, "pk", None),
            action=action,
            ip_address=client_ip(request) if request is not None else None,
            user_agent=(request.META.get("HTTP_USER_AGENT", "") if request is not None else "")[:500],
            metadata=metadata or {},
        )
