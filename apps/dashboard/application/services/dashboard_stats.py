from __future__ import annotations

from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from apps.accounts.domain.permissions import Role
from apps.catalog.domain.stock import LOW_STOCK_THRESHOLD
from apps.catalog.models import Product
from apps.core.domain.money import ZERO, round_money
from apps.orders.domain.status import OrderStatus
from apps.orders.models import Order


class DashboardStatsService:
    @staticmethod
    def overview(*, recent_limit: int = 5) -> dict:
        billable = Order.objects.exclude(status=OrderStatus.CANCELLED)
        revenue = billable.aggregate(total=Sum("total_amount"))["total"] or ZERO

        customers = get_user_model().objects.filter(
            Q(account_profile__role=Role.CUSTOMER.value) | Q(account_profile__isnull=True),
            is_superuser=False,
        )

        by_status = {status.value: 0 for status in OrderStatus}
        for row in Order.objects.values("status").annotate(count=Count("id")):
            by_status[row["status"]] = row["count"]

        low_stock = (
            Product.objects.filter(
                status=Product.STATUS_ACTIVE,
                manage_stock=True,
                stock_quantity__lte=LOW_STOCK_THRESHOLD,
            )
            .order_by("stock_quantity", "name")
            .values("id", "name", "sku", "stock_quantity")
        )

        recent = Order.objects.select_related("user").order_by("-created_at")[:recent_limit]
        return {
            "totals": {
                "orders": Order.objects.count(),
                "revenue": round_money(revenue),
                "customers": customers.count(),
                "active_products": Product.objects.filter(status=Product.STATUS_ACTIVE).count(),
            },
            "orders_by_status": by_status,
            "low_stock_products": list(low_stock),
            "recent_orders": [
                {
                    "id": str(order.pk),
                    "order_number": order.order_number,
                    "customer_email": order.user.email,
                    "status": order.status,
                    "payment_status": order.payment_status,
                    "total_amount": order.total_amount,
                    "created_at": order.created_at.isoformat(),
                }
                for order in recent
            ],
        }

    @staticmethod
    def order_stats(*, days: int = 30) -> dict:
        """Daily order count and revenue; cancelled orders count but add no revenue."""
        since = timezone.now() - timedelta(days=days)
        rows = (
            Order.objects.filter(created_at__gte=since)
            .annotate(day=TruncDate("created_at"))
            .values("day")
            .annotate(
                orders=Count("id"),
                revenue=Sum("total_amount", filter=~Q(status=OrderStatus.CANCELLED)),
            )
            .order_by("day")
        )
        daily = [
            {
                "date": row["day"].isoformat(),
                "orders": row["orders"],
                "revenue": round_money(row["revenue"] or ZERO),
            }
            for row in rows
        ]
        return {
            "period_days": days,
            "daily": daily,
            "total_orders": sum(row["orders"] for row in daily),
            "total_revenue": round_money(sum((row["revenue"] for row in daily), ZERO)),
        }
