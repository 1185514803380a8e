from __future__ import annotations

import json
import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction

from apps.system.domain.settings import (
    CURRENCY_SYMBOL_KEY,
    DEFAULT_STORE_SETTINGS,
    FREE_SHIPPING_THRESHOLD_KEY,
    SHIPPING_COST_KEY,
    TAX_RATE_KEY,
    StoreSettings,
)
from apps.system.models import SystemSetting

logger = logging.getLogger("freshcounty.system")

_DECIMAL_KEYS = {
    TAX_RATE_KEY: "tax_rate",
    SHIPPING_COST_KEY: "shipping_cost_standard",
    FREE_SHIPPING_THRESHOLD_KEY: "free_shipping_threshold",
}


def _parse_decimal(key: str, raw: str, default: Decimal) -> Decimal:
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        logger.warning("unparseable store setting key=%s value=%r, using default %s", key, raw, default)
        return default
    if not value.is_finite() or value < 0:
        logger.warning("out-of-range store setting key=%s value=%r, using default %s", key, raw, default)
        return default
    return value


def coerce_setting_value(setting: SystemSetting):
    """Typed view of a stored setting, used by the public settings endpoint."""
    raw = setting.setting_value
    if setting.setting_type == SystemSetting.TYPE_NUMBER:
        try:
            return float(raw)
        except (TypeError, ValueError):
            return raw
    if setting.setting_type == SystemSetting.TYPE_BOOLEAN:
        return str(raw).strip().lower() in {"1", "true", "yes", "on"}
    if setting.setting_type == SystemSetting.TYPE_JSON:
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            return raw
    return raw


class StoreSettingsService:
    @staticmethod
    def load() -> StoreSettings:
        keys = [*_DECIMAL_KEYS.keys(), CURRENCY_SYMBOL_KEY]
        rows = dict(
            SystemSetting.objects.filter(setting_key__in=keys).values_list("setting_key", "setting_value")
        )
        values = {}
        for key, attr in _DECIMAL_KEYS.items():
            default = getattr(DEFAULT_STORE_SETTINGS, attr)
            values[attr] = _parse_decimal(key, rows[key], default) if key in rows else default

        symbol = (rows.get(CURRENCY_SYMBOL_KEY) or "").strip()
        values["currency_symbol"] = symbol or DEFAULT_STORE_SETTINGS.currency_symbol
        return StoreSettings(**values)

    @staticmethod
    def public_settings() -> dict:
        return {
            row.setting_key: coerce_setting_value(row)
            for row in SystemSetting.objects.filter(is_public=True)
        }

    @staticmethod
    @transaction.atomic
    def update_settings(*, values: dict) -> list[SystemSetting]:
        """Upsert raw string values; unknown keys are created as string settings."""
        updated = []
        for key, value in values.items():
            if isinstance(value, (dict, list)):
                raw, setting_type = json.dumps(value), SystemSetting.TYPE_JSON
            elif isinstance(value, bool):
                raw, setting_type = "true" if value else "false", SystemSetting.TYPE_BOOLEAN
            elif isinstance(value, (int, float, Decimal)):
                raw, setting_type = str(value), SystemSetting.TYPE_NUMBER
            else:
                raw, setting_type = str(value), None

            setting, created = SystemSetting.objects.select_for_update().get_or_create(
                setting_key=key,
                defaults={"setting_value": raw, "setting_type": setting_type or SystemSetting.TYPE_STRING},
            )
            if not created:
                setting.setting_value = raw
                if setting_type:
                    setting.setting_type = setting_type
                setting.save(update_fields=["setting_value", "setting_type", "updated_at"])
            updated.append(setting)
        logger.info("store settings updated keys=%s", sorted(values.keys()))
        return updated
