from __future__ import annotations

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

from apps.notifications.domain.errors import EmailGatewayError


class SmtpEmailGateway:
    """Delivers through Django's configured email backend (SMTP in production)."""

    name = "smtp"

    def send_email(
        self,
        *,
        subject: str,
        text_body: str,
        html_body: str,
        to: list[str],
        from_email: str | None = None,
        reply_to: list[str] | None = None,
    ) -> None:
        message = EmailMultiAlternatives(
            subject=subject,
            body=text_body,
            from_email=from_email or settings.DEFAULT_FROM_EMAIL,
            to=to,
            reply_to=reply_to or None,
        )
        message.attach_alternative(html_body, "text/html")
        try:
            message.send(fail_silently=False)
        except Exception as exc:  # transport errors vary by backend
            raise EmailGatewayError(str(exc)) from exc
