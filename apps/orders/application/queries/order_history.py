from __future__ import annotations

from apps.orders.application.use_cases.update_order_status import actor_name
from apps.orders.models import OrderStatusHistory


class OrderStatusHistoryQuery:
    @staticmethod
    def for_order(order) -> list[dict]:
        """Oldest entry first."""
        rows = OrderStatusHistory.objects.filter(order=order).select_related("changed_by").order_by("created_at", "id")
        return [
            {
                "id": row.pk,
                "status": row.status,
                "notes": row.notes,
                "changed_by": row.changed_by_id,
                "changed_by_name": actor_name(row.changed_by),
                "created_at": row.created_at.isoformat(),
            }
            for row in rows
        ]
