from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.application.services.audit_service import AccountAuditService
from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.application.use_cases.confirm_password_reset import (
    ConfirmPasswordResetCommand,
    ConfirmPasswordResetUseCase,
)
from apps.accounts.application.use_cases.login import LoginCommand, LoginUseCase
from apps.accounts.application.use_cases.register_customer import (
    RegisterCustomerCommand,
    RegisterCustomerUseCase,
)
from apps.accounts.application.use_cases.request_password_reset import (
    RequestPasswordResetCommand,
    RequestPasswordResetUseCase,
)
from apps.accounts.domain.errors import InvalidCredentialsError
from apps.accounts.domain.permissions import role_info
from apps.accounts.interfaces.api.serializers import (
    LoginSerializer,
    PasswordResetConfirmSerializer,
    PasswordResetRequestSerializer,
    RegisterSerializer,
)
from apps.accounts.models import AccountAuditLog, AccountProfile
from apps.core.interfaces.api.responses import success_response


def _tokens_for(user) -> dict:
    refresh = RefreshToken.for_user(user)
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


def _user_payload(user) -> dict:
    profile = AccountProfile.objects.filter(user=user).first()
    role = AccountIdentityService.role_for(user)
    return {
        "id": user.pk,
        "email": user.email,
        "full_name": AccountIdentityService.display_name(user),
        "phone": profile.phone if profile else "",
        "role": role,
        "date_joined": user.date_joined.isoformat() if user.date_joined else None,
    }


class _AuthThrottled(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "auth"


class RegisterAPI(_AuthThrottled):
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = RegisterCustomerUseCase.execute(
            RegisterCustomerCommand(
                full_name=data["full_name"],
                email=data["email"],
                password=data["password"],
                phone=data.get("phone", ""),
            )
        )
        AccountAuditService.record(request=request, action=AccountAuditLog.ACTION_REGISTERED, user=result.user)
        return success_response(
            message="Registration successful",
            data={"user": _user_payload(result.user), **_tokens_for(result.user)},
            http_status=status.HTTP_201_CREATED,
        )


class LoginAPI(_AuthThrottled):
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = LoginUseCase.execute(LoginCommand(email=data["email"], password=data["password"]))
        except InvalidCredentialsError:
            AccountAuditService.record(
                request=request,
                action=AccountAuditLog.ACTION_LOGIN_FAILED,
                metadata={"email": data["email"].strip().lower()},
            )
            raise

        AccountAuditService.record(request=request, action=AccountAuditLog.ACTION_LOGIN_SUCCEEDED, user=result.user)
        return success_response(
            message="Login successful",
            data={
                "user": _user_payload(result.user),
                "role_info": role_info(result.role),
                **_tokens_for(result.user),
            },
        )


class MeAPI(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        role = AccountIdentityService.role_for(request.user)
        return success_response(
            message="Profile retrieved",
            data={"user": _user_payload(request.user), "role_info": role_info(role)},
        )


class PermissionsAPI(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        role = AccountIdentityService.role_for(request.user)
        return success_response(message="Permissions retrieved", data=role_info(role))


class PasswordResetRequestAPI(_AuthThrottled):
    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = RequestPasswordResetUseCase.execute(
            RequestPasswordResetCommand(email=serializer.validated_data["email"])
        )
        if result.user is not None:
            AccountAuditService.record(
                request=request,
                action=AccountAuditLog.ACTION_PASSWORD_RESET_REQUESTED,
                user=result.user,
                metadata={"sent": result.sent},
            )
        return success_response(
            message="If an account exists for this email, a password reset link has been sent",
        )


class PasswordResetConfirmAPI(_AuthThrottled):
    def post(self, request):
        serializer = PasswordResetConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = ConfirmPasswordResetUseCase.execute(
            ConfirmPasswordResetCommand(uid=data["uid"], token=data["token"], new_password=data["new_password"])
        )
        AccountAuditService.record(request=request, action=AccountAuditLog.ACTION_PASSWORD_RESET_COMPLETED, user=user)
        return success_response(message="Password has been reset successfully")
