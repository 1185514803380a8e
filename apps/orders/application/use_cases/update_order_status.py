from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.db import transaction

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.catalog.application.services.inventory_service import InventoryService
from apps.core.domain.errors import StoreError
from apps.notifications.application.services.dispatcher import NotificationDispatcher, notify_admins
from apps.notifications.application.services.order_emails import build_order_email_data, customer_name_for
from apps.notifications.domain.events import AdminAlertType, NotificationEvent
from apps.orders.domain.errors import InvalidStatusTransitionError, OrderNotFoundError, OrderValidationError
from apps.orders.domain.status import (
    CUSTOMER_NOTIFY_STATUSES,
    OrderStatus,
    PaymentStatus,
    admin_alert_needed,
    admin_alert_title,
    can_transition,
    is_new_order_confirmation,
)
from apps.orders.models import Order, OrderStatusHistory

logger = logging.getLogger("freshcounty.orders")


@dataclass(frozen=True)
class UpdateOrderStatusCommand:
    order_id: object
    new_status: str
    notes: str = ""
    tracking_number: str | None = None
    actor: object | None = None
    notify_customer: bool = True
    notify_admin: bool = True


@dataclass(frozen=True)
class StatusChange:
    order: Order
    previous_status: str
    new_status: str


def _parse_status(raw: str) -> OrderStatus:
    try:
        return OrderStatus(str(raw or "").strip().lower())
    except ValueError as exc:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise OrderValidationError(f"Invalid status. Must be one of: {allowed}", field="status") from exc


class UpdateOrderStatusUseCase:
    @staticmethod
    @transaction.atomic
    def execute(cmd: UpdateOrderStatusCommand) -> StatusChange:
        new_status = _parse_status(cmd.new_status)
        order = Order.objects.select_for_update().select_related("user").filter(pk=cmd.order_id).first()
        if order is None:
            raise OrderNotFoundError()

        previous = order.status
        if (
            getattr(settings, "ORDERS_ENFORCE_TRANSITIONS", False)
            and previous != new_status
            and not can_transition(previous, new_status)
        ):
            raise InvalidStatusTransitionError(current=previous, new=new_status)

        order.status = new_status.value
        update_fields = ["status", "updated_at"]
        if cmd.tracking_number:
            order.tracking_number = cmd.tracking_number
            update_fields.append("tracking_number")

        # Restoring twice would inflate stock, so a repeated cancel leaves stock alone.
        if new_status == OrderStatus.CANCELLED and previous != OrderStatus.CANCELLED:
            for item in order.items.all():
                InventoryService.restore(product_id=item.product_id, quantity=item.quantity)

        if new_status == OrderStatus.DELIVERED and order.payment_status == PaymentStatus.PENDING:
            order.payment_status = PaymentStatus.PAID.value
            update_fields.append("payment_status")

        order.save(update_fields=update_fields)
        OrderStatusHistory.objects.create(
            order=order,
            status=new_status.value,
            notes=cmd.notes or f"Status changed from {previous} to {new_status.value}",
            changed_by=cmd.actor,
        )
        logger.info(
            "order status changed order=%s from=%s to=%s actor_id=%s",
            order.order_number,
            previous,
            new_status.value,
            getattr(cmd.actor, "pk", None),
        )

        _schedule_notifications(cmd, order, previous, new_status)
        return StatusChange(order=order, previous_status=previous, new_status=new_status.value)


def _schedule_notifications(cmd: UpdateOrderStatusCommand, order: Order, previous: str, new_status: OrderStatus) -> None:
    if cmd.notify_customer and new_status in CUSTOMER_NOTIFY_STATUSES and order.user.email:
        email_data = build_order_email_data(order, new_status.value, tracking_number=cmd.tracking_number)
        recipient = order.user.email
        transaction.on_commit(
            lambda: NotificationDispatcher.dispatch(NotificationEvent.ORDER_STATUS_UPDATE, recipient, email_data)
        )

    if cmd.notify_admin and admin_alert_needed(previous, new_status):
        customer_name = customer_name_for(order)
        alert = {
            "title": admin_alert_title(previous, new_status),
            "message": (
                f"Order #{order.order_number} status changed from {previous} to {new_status.value}. "
                f"Customer: {customer_name}"
            ),
            "data": {
                "orderNumber": order.order_number,
                "previousStatus": previous,
                "newStatus": new_status.value,
                "customerName": customer_name,
                "customerEmail": order.user.email,
                "amount": str(order.total_amount),
            },
            "alert_type": (
                AdminAlertType.NEW_ORDER if is_new_order_confirmation(previous, new_status) else AdminAlertType.ORDER_STATUS
            ),
        }
        transaction.on_commit(lambda: notify_admins(**alert))


@dataclass(frozen=True)
class BulkUpdateOrderStatusCommand:
    order_ids: list
    new_status: str
    notes: str = ""
    actor: object | None = None


@dataclass
class BulkUpdateResult:
    success_count: int = 0
    total_count: int = 0
    failures: list[dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "success_count": self.success_count,
            "total_count": self.total_count,
            "failures": self.failures,
        }


class BulkUpdateOrderStatusUseCase:
    """Each order transitions in its own transaction; one failure does not stop the batch."""

    @staticmethod
    def execute(cmd: BulkUpdateOrderStatusCommand) -> BulkUpdateResult:
        _parse_status(cmd.new_status)
        result = BulkUpdateResult(total_count=len(cmd.order_ids))
        for order_id in cmd.order_ids:
            try:
                UpdateOrderStatusUseCase.execute(
                    UpdateOrderStatusCommand(
                        order_id=order_id,
                        new_status=cmd.new_status,
                        notes=cmd.notes,
                        actor=cmd.actor,
                    )
                )
            except StoreError as exc:
                logger.warning("bulk status update failed order=%s error=%s", order_id, exc.message)
                result.failures.append({"order_id": str(order_id), "message": exc.message})
                continue
            result.success_count += 1
        return result


def actor_name(user) -> str:
    return AccountIdentityService.display_name(user) if user is not None else "System"
