from __future__ import annotations

import logging
from collections.abc import Iterable

from django.conf import settings
from django.utils import timezone
from django.utils.html import strip_tags

from apps.notifications.application.services.templates import render_email
from apps.notifications.domain.events import AdminAlertType, NotificationEvent
from apps.notifications.infrastructure.gateways.smtp import SmtpEmailGateway

logger = logging.getLogger("freshcounty.notifications")

STATUS_TEMPLATES = {
    "delivered": ("order-delivered", "Order Delivered - #{order_number}"),
    "cancelled": ("order-cancelled", "Order Cancelled - #{order_number}"),
}


def company_context() -> dict:
    return {
        "company_name": getattr(settings, "STORE_COMPANY_NAME", "Fresh County"),
        "website_url": getattr(settings, "STORE_WEBSITE_URL", ""),
        "support_email": getattr(settings, "STORE_SUPPORT_EMAIL", ""),
    }


def _recipients(to) -> list[str]:
    if isinstance(to, str):
        to = [to]
    return [address.strip() for address in to or [] if address and address.strip()]


class NotificationDispatcher:
    """Renders and sends transactional email. Sending is best effort and never raises."""

    gateway = SmtpEmailGateway()

    @classmethod
    def resolve(cls, event: NotificationEvent, data: dict) -> tuple[str, str] | None:
        """Return (template_name, subject) for the event, or None when the event is suppressed."""
        company = company_context()["company_name"]
        order_number = data.get("order_number", "")

        if event == NotificationEvent.ORDER_CONFIRMATION:
            return "order-confirmation", f"Order Confirmation - #{order_number}"
        if event == NotificationEvent.ORDER_STATUS_UPDATE:
            status = str(data.get("order_status", "")).lower()
            if status == "shipped":
                return None
            template_name, subject = STATUS_TEMPLATES.get(
                status, ("order-confirmation", "Order Update - #{order_number}")
            )
            return template_name, subject.format(order_number=order_number)
        if event == NotificationEvent.WELCOME:
            return "welcome", f"Welcome to {company}!"
        if event == NotificationEvent.PASSWORD_RESET:
            return "password-reset", "Password Reset Request"
        if event == NotificationEvent.PASSWORD_RESET_SUCCESS:
            return "password-reset-success", f"Password Changed Successfully - {company}"
        if event == NotificationEvent.ADMIN_ALERT:
            return "admin-notification", f"Admin Alert: {data.get('title', '')}"
        raise ValueError(f"Unknown notification event: {event}")

    @classmethod
    def dispatch(cls, event: NotificationEvent, to: str | Iterable[str], data: dict | None = None) -> bool:
        data = dict(data or {})
        try:
            resolved = cls.resolve(NotificationEvent(event), data)
            if resolved is None:
                logger.info(
                    "notification skipped event=%s status=%s order=%s",
                    event,
                    data.get("order_status"),
                    data.get("order_number"),
                )
                return True

            recipients = _recipients(to)
            if not recipients:
                logger.warning("notification has no recipients event=%s", event)
                return False

            template_name, subject = resolved
            context = {**data, **company_context()}
            html_body = render_email(template_name, context)
            support = context.get("support_email")
            cls.gateway.send_email(
                subject=subject,
                text_body=strip_tags(html_body).strip(),
                html_body=html_body,
                to=recipients,
                reply_to=[support] if support else None,
            )
        except Exception:
            logger.exception("notification delivery failed event=%s to=%s", event, to)
            return False

        logger.info("notification sent event=%s to=%s", event, ", ".join(recipients))
        return True


def notify_admins(
    title: str,
    message: str,
    data: dict | None = None,
    alert_type: AdminAlertType | str = AdminAlertType.ORDER_STATUS,
) -> bool:
    return NotificationDispatcher.dispatch(
        NotificationEvent.ADMIN_ALERT,
        list(getattr(settings, "ADMIN_NOTIFICATION_EMAILS", [])),
        {
            "type": str(alert_type),
            "title": title,
            "message": message,
            "data": data or {},
            "timestamp": timezone.now().isoformat(),
        },
    )
