from __future__ import annotations

import logging
from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction

from apps.accounts.domain.errors import AccountAlreadyExistsError, AccountValidationError
from apps.accounts.domain.permissions import Role
from apps.accounts.domain.policies import validate_email, validate_full_name, validate_phone
from apps.accounts.models import AccountProfile
from apps.notifications.application.services.dispatcher import NotificationDispatcher
from apps.notifications.domain.events import NotificationEvent

logger = logging.getLogger("freshcounty.accounts")


@dataclass(frozen=True)
class RegisterCustomerCommand:
    full_name: str
    email: str
    password: str
    phone: str = ""


@dataclass(frozen=True)
class RegisterCustomerResult:
    user: object
    profile: AccountProfile


class RegisterCustomerUseCase:
    @staticmethod
    @transaction.atomic
    def execute(cmd: RegisterCustomerCommand) -> RegisterCustomerResult:
        full_name = validate_full_name(cmd.full_name)
        email = validate_email(cmd.email)
        phone = validate_phone(cmd.phone)

        UserModel = get_user_model()
        if UserModel.objects.filter(email__iexact=email).exists():
            raise AccountAlreadyExistsError("An account with this email already exists.", field="email")

        try:
            validate_password(cmd.password)
        except ValidationError as exc:
            raise AccountValidationError("; ".join(exc.messages), field="password") from exc

        first_name, _, last_name = full_name.partition(" ")
        user = UserModel.objects.create_user(
            username=email,
            email=email,
            password=cmd.password,
            first_name=first_name[:150],
            last_name=last_name[:150],
        )
        profile = AccountProfile.objects.create(
            user=user,
            role=Role.CUSTOMER.value,
            full_name=full_name,
            phone=phone,
        )
        logger.info("customer registered user_id=%s", user.pk)

        transaction.on_commit(
            lambda: NotificationDispatcher.dispatch(
                NotificationEvent.WELCOME,
                email,
                {"first_name": first_name, "full_name": full_name, "email": email},
            )
        )
        return RegisterCustomerResult(user=user, profile=profile)
