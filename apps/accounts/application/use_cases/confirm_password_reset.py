from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.encoding import force_str
from django.utils.http import urlsafe_base64_decode

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.errors import AccountValidationError, PasswordResetTokenInvalidError
from apps.notifications.application.services.dispatcher import NotificationDispatcher
from apps.notifications.domain.events import NotificationEvent


@dataclass(frozen=True)
class ConfirmPasswordResetCommand:
    uid: str
    token: str
    new_password: str


class ConfirmPasswordResetUseCase:
    @staticmethod
    @transaction.atomic
    def execute(cmd: ConfirmPasswordResetCommand):
        UserModel = get_user_model()
        try:
            user_pk = force_str(urlsafe_base64_decode(cmd.uid))
            user = UserModel.objects.select_for_update().get(pk=user_pk)
        except (TypeError, ValueError, OverflowError, UserModel.DoesNotExist):
            raise PasswordResetTokenInvalidError("Invalid or expired reset link.", field="token")

        if not default_token_generator.check_token(user, cmd.token):
            raise PasswordResetTokenInvalidError("Invalid or expired reset link.", field="token")

        try:
            validate_password(cmd.new_password, user=user)
        except ValidationError as exc:
            raise AccountValidationError("; ".join(exc.messages), field="password") from exc

        user.set_password(cmd.new_password)
        user.save(update_fields=["password"])

        email = user.email
        name = AccountIdentityService.display_name(user)
        transaction.on_commit(
            lambda: NotificationDispatcher.dispatch(
                NotificationEvent.PASSWORD_RESET_SUCCESS,
                email,
                {"full_name": name},
            )
        )
        return user
