from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import authenticate, get_user_model

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.errors import InvalidCredentialsError
from apps.accounts.domain.policies import normalize_email


@dataclass(frozen=True)
class LoginCommand:
    email: str
    password: str


@dataclass(frozen=True)
class LoginResult:
    user: object
    role: str


class LoginUseCase:
    @staticmethod
    def execute(cmd: LoginCommand) -> LoginResult:
        email = normalize_email(cmd.email)
        if not email or not cmd.password:
            raise InvalidCredentialsError()

        # Accounts created through the admin may carry a username different from the email.
        candidate = get_user_model().objects.filter(email__iexact=email).first()
        username = candidate.get_username() if candidate is not None else email

        user = authenticate(username=username, password=cmd.password)
        if user is None:
            raise InvalidCredentialsError()

        return LoginResult(user=user, role=AccountIdentityService.role_for(user))
