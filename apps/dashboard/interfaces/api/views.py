from __future__ import annotations

from rest_framework.views import APIView

from apps.accounts.domain.permissions import Permission
from apps.accounts.interfaces.api.permissions import require_permission
from apps.core.interfaces.api.responses import success_response
from apps.dashboard.application.services.dashboard_stats import DashboardStatsService


def _period(request, default: int = 30) -> int:
    try:
        days = int(request.query_params.get("period", default))
    except (TypeError, ValueError):
        days = default
    return min(max(days, 1), 365)


class DashboardAPI(APIView):
    permission_classes = [require_permission(Permission.VIEW_DASHBOARD)]

    def get(self, request):
        return success_response(message="Dashboard stats retrieved", data=DashboardStatsService.overview())


class OrderStatsAPI(APIView):
    permission_classes = [require_permission(Permission.VIEW_ANALYTICS, Permission.VIEW_REPORTS)]

    def get(self, request):
        return success_response(
            message="Order stats retrieved",
            data=DashboardStatsService.order_stats(days=_period(request)),
        )
