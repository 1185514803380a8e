from __future__ import annotations

import logging

from django.template import TemplateDoesNotExist, engines
from django.template.loader import get_template

logger = logging.getLogger("freshcounty.notifications")

FALLBACK_TEMPLATES = {
    "order-confirmation": (
        "<h2>Order Confirmation</h2>"
        "<p>Dear {{ customer_name }},</p>"
        "<p>Your order #{{ order_number }} has been confirmed.</p>"
        "<p>Order Total: {{ order_total }}</p>"
        "<p>Thank you for shopping with {{ company_name }}!</p>"
    ),
    "welcome": (
        "<h2>Welcome to {{ company_name }}!</h2>"
        "<p>Dear {% firstof first_name full_name %},</p>"
        "<p>Welcome to {{ company_name }}! We're excited to have you as a customer.</p>"
        "<p>Start shopping for fresh, quality products today!</p>"
    ),
    "password-reset": (
        "<h2>Password Reset</h2>"
        "<p>Dear {{ full_name }},</p>"
        "<p>You requested a password reset. Click the link below to reset your password:</p>"
        '<p><a href="{{ reset_link }}">Reset Password</a></p>'
    ),
}

GENERIC_TEMPLATE = "<h2>{{ title }}</h2><p>{{ message }}</p>"


def render_email(template_name: str, context: dict) -> str:
    """Render `emails/<name>.html`, else the built-in fallback, else the generic title/message body."""
    try:
        return get_template(f"emails/{template_name}.html").render(context)
    except TemplateDoesNotExist:
        logger.warning("email template %s not found, using fallback", template_name)

    source = FALLBACK_TEMPLATES.get(template_name, GENERIC_TEMPLATE)
    return engines["django"].from_string(source).render(context)
