from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from django.conf import settings
from django.contrib.auth.tokens import default_token_generator
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.errors import AccountNotFoundError
from apps.accounts.domain.policies import validate_email
from apps.notifications.application.services.dispatcher import NotificationDispatcher
from apps.notifications.domain.events import NotificationEvent

logger = logging.getLogger("freshcounty.accounts")


@dataclass(frozen=True)
class RequestPasswordResetCommand:
    email: str


@dataclass(frozen=True)
class RequestPasswordResetResult:
    user: object | None
    sent: bool


def build_reset_link(*, uid: str, token: str) -> str:
    base = getattr(settings, "STORE_WEBSITE_URL", "").rstrip("/")
    return f"{base}/reset-password?{urlencode({'uid': uid, 'token': token})}"


class RequestPasswordResetUseCase:
    """Never reveals whether the email belongs to an account."""

    @staticmethod
    def execute(cmd: RequestPasswordResetCommand) -> RequestPasswordResetResult:
        email = validate_email(cmd.email)
        try:
            user = AccountIdentityService.resolve_user_by_email(email=email)
        except AccountNotFoundError:
            logger.info("password reset requested for unknown email")
            return RequestPasswordResetResult(user=None, sent=False)

        if not user.is_active:
            return RequestPasswordResetResult(user=user, sent=False)

        uid = urlsafe_base64_encode(force_bytes(user.pk))
        token = default_token_generator.make_token(user)
        sent = NotificationDispatcher.dispatch(
            NotificationEvent.PASSWORD_RESET,
            user.email,
            {
                "full_name": AccountIdentityService.display_name(user),
                "reset_link": build_reset_link(uid=uid, token=token),
                "uid": uid,
                "token": token,
            },
        )
        return RequestPasswordResetResult(user=user, sent=sent)
