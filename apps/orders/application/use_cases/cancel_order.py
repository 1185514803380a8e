from __future__ import annotations

from dataclasses import dataclass

from django.db import transaction

from apps.orders.application.use_cases.update_order_status import (
    StatusChange,
    UpdateOrderStatusCommand,
    UpdateOrderStatusUseCase,
)
from apps.orders.domain.errors import OrderNotCancellableError, OrderNotFoundError
from apps.orders.domain.status import CUSTOMER_CANCELLABLE, OrderStatus
from apps.orders.models import Order


@dataclass(frozen=True)
class CancelOrderCommand:
    user: object
    order_id: object
    reason: str = ""


class CancelOrderUseCase:
    """Customer-initiated cancellation; staff use the status endpoint instead."""

    @staticmethod
    @transaction.atomic
    def execute(cmd: CancelOrderCommand) -> StatusChange:
        order = Order.objects.select_for_update().filter(pk=cmd.order_id, user=cmd.user).first()
        if order is None:
            raise OrderNotFoundError()
        if order.status not in CUSTOMER_CANCELLABLE:
            raise OrderNotCancellableError()

        notes = "Cancelled by customer"
        if cmd.reason:
            notes = f"{notes}: {cmd.reason.strip()}"
        return UpdateOrderStatusUseCase.execute(
            UpdateOrderStatusCommand(
                order_id=order.pk,
                new_status=OrderStatus.CANCELLED.value,
                notes=notes,
                actor=cmd.user,
            )
        )
