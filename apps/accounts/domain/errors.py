from __future__ import annotations

from apps.core.domain.errors import AuthError, ConflictError, NotFoundError, StoreValidationError


class AccountValidationError(StoreValidationError):
    pass


class FullNameInvalidError(AccountValidationError):
    pass


class PhoneInvalidError(AccountValidationError):
    pass


class EmailInvalidError(AccountValidationError):
    pass


class PasswordResetTokenInvalidError(AccountValidationError):
    pass


class AccountAlreadyExistsError(ConflictError):
    default_message = "Account already exists."


class InvalidCredentialsError(AuthError):
    default_message = "Invalid email or password"


class AccountNotFoundError(NotFoundError):
    default_message = "Account not found."
