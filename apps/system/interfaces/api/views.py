from __future__ import annotations

from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from apps.accounts.domain.permissions import Permission
from apps.accounts.interfaces.api.permissions import MethodPermissionMixin
from apps.core.interfaces.api.responses import success_response
from apps.system.application.services.store_settings_service import StoreSettingsService
from apps.system.interfaces.api.serializers import SettingsUpdateSerializer, SystemSettingSerializer
from apps.system.models import SystemSetting


class PublicSettingsAPI(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return success_response(message="Settings retrieved", data={"settings": StoreSettingsService.public_settings()})


class AdminSettingsAPI(MethodPermissionMixin, APIView):
    method_permissions = {
        "GET": (Permission.VIEW_SETTINGS,),
        "PATCH": (Permission.EDIT_SETTINGS,),
    }

    def get(self, request):
        return success_response(
            message="Settings retrieved",
            data={"settings": SystemSettingSerializer(SystemSetting.objects.all(), many=True).data},
        )

    def patch(self, request):
        serializer = SettingsUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = StoreSettingsService.update_settings(values=serializer.validated_data["settings"])
        return success_response(
            message="Settings updated successfully",
            data={"settings": SystemSettingSerializer(updated, many=True).data},
        )
