from __future__ import annotations

from rest_framework import serializers

from apps.system.application.services.store_settings_service import coerce_setting_value
from apps.system.domain.settings import FREE_SHIPPING_THRESHOLD_KEY, SHIPPING_COST_KEY, TAX_RATE_KEY
from apps.system.models import SystemSetting

NUMERIC_KEYS = {TAX_RATE_KEY, SHIPPING_COST_KEY, FREE_SHIPPING_THRESHOLD_KEY}


class SystemSettingSerializer(serializers.ModelSerializer):
    value = serializers.SerializerMethodField()

    class Meta:
        model = SystemSetting
        fields = ["setting_key", "setting_value", "value", "setting_type", "description", "is_public", "updated_at"]

    def get_value(self, obj):
        return coerce_setting_value(obj)


class SettingsUpdateSerializer(serializers.Serializer):
    settings = serializers.DictField(child=serializers.JSONField(), allow_empty=False)

    def validate_settings(self, value: dict) -> dict:
        errors = {}
        for key, raw in value.items():
            if not str(key).strip() or len(str(key)) > 100:
                errors[key] = "Invalid setting key"
            elif key in NUMERIC_KEYS:
                try:
                    number = float(raw)
                except (TypeError, ValueError):
                    errors[key] = "Must be a number"
                    continue
                if number < 0:
                    errors[key] = "Must not be negative"
        if errors:
            raise serializers.ValidationError(errors)
        return value
