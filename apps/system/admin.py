from django.contrib import admin

from .models import SystemSetting


@admin.register(SystemSetting)
class SystemSettingAdmin(admin.ModelAdmin):
    list_display = ("setting_key", "setting_value", "setting_type", "is_public", "updated_at")
    list_filter = ("setting_type", "is_public")
    search_fields = ("setting_key", "description")
