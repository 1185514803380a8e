from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from apps.accounts.models import AccountProfile
from apps.system.application.services.store_settings_service import StoreSettingsService
from apps.system.domain.settings import DEFAULT_STORE_SETTINGS
from apps.system.models import SystemSetting


class StoreSettingsServiceTests(TestCase):
    def test_load_returns_defaults_when_no_rows(self):
        self.assertEqual(StoreSettingsService.load(), DEFAULT_STORE_SETTINGS)

    def test_load_parses_stored_values(self):
        SystemSetting.objects.create(setting_key="tax_rate", setting_value="10", setting_type="number")
        SystemSetting.objects.create(setting_key="shipping_cost_standard", setting_value="2000.50")
        settings = StoreSettingsService.load()
        self.assertEqual(settings.tax_rate, Decimal("10"))
        self.assertEqual(settings.shipping_cost_standard, Decimal("2000.50"))
        self.assertEqual(settings.free_shipping_threshold, Decimal("50000"))

    def test_unparseable_value_falls_back_to_default(self):
        SystemSetting.objects.create(setting_key="tax_rate", setting_value="seven")
        with self.assertLogs("freshcounty.system", level="WARNING"):
            settings = StoreSettingsService.load()
        self.assertEqual(settings.tax_rate, Decimal("7.5"))

    def test_update_settings_upserts_and_infers_type(self):
        SystemSetting.objects.create(setting_key="tax_rate", setting_value="7.5", setting_type="number")
        StoreSettingsService.update_settings(values={"tax_rate": 8, "store_open": True})
        self.assertEqual(SystemSetting.objects.get(setting_key="tax_rate").setting_value, "8")
        flag = SystemSetting.objects.get(setting_key="store_open")
        self.assertEqual(flag.setting_type, SystemSetting.TYPE_BOOLEAN)
        self.assertEqual(flag.setting_value, "true")


class SettingsApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        SystemSetting.objects.create(
            setting_key="currency_symbol", setting_value="₦", setting_type="string", is_public=True
        )
        SystemSetting.objects.create(
            setting_key="tax_rate", setting_value="7.5", setting_type="number", is_public=True
        )
        SystemSetting.objects.create(setting_key="smtp_secret", setting_value="x", is_public=False)

    def _user(self, role):
        user = get_user_model().objects.create_user(username=f"{role}@example.com", email=f"{role}@example.com", password="pw")
        AccountProfile.objects.create(user=user, role=role)
        return user

    def test_public_settings_only_exposes_public_rows(self):
        res = self.client.get("/api/settings/public/")
        self.assertEqual(res.status_code, 200)
        settings = res.data["data"]["settings"]
        self.assertEqual(settings["tax_rate"], 7.5)
        self.assertNotIn("smtp_secret", settings)

    def test_admin_settings_requires_permission(self):
        self.client.force_authenticate(self._user("staff"))
        res = self.client.get("/api/admin/settings/")
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["message"], "You do not have permission to perform this action")

    def test_admin_can_patch_settings(self):
        self.client.force_authenticate(self._user("admin"))
        res = self.client.patch("/api/admin/settings/", {"settings": {"tax_rate": 5}}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(StoreSettingsService.load().tax_rate, Decimal("5"))

    def test_negative_tax_rate_is_rejected(self):
        self.client.force_authenticate(self._user("admin"))
        res = self.client.patch("/api/admin/settings/", {"settings": {"tax_rate": -1}}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.data["success"])
