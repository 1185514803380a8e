from __future__ import annotations

from django.db import models


class SystemSetting(models.Model):
    TYPE_STRING = "string"
    TYPE_NUMBER = "number"
    TYPE_BOOLEAN = "boolean"
    TYPE_JSON = "json"

    TYPE_CHOICES = [
        (TYPE_STRING, "String"),
        (TYPE_NUMBER, "Number"),
        (TYPE_BOOLEAN, "Boolean"),
        (TYPE_JSON, "JSON"),
    ]

    setting_key = models.CharField(max_length=100, unique=True)
    setting_value = models.TextField(blank=True, default="")
    setting_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_STRING)
    description = models.CharField(max_length=255, blank=True, default="")
    is_public = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["setting_key"]

    def __str__(self) -> str:
        return f"{self.setting_key}={self.setting_value}"
