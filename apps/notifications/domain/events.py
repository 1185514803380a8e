from __future__ import annotations

from enum import StrEnum


class NotificationEvent(StrEnum):
    ORDER_CONFIRMATION = "order_confirmation"
    ORDER_STATUS_UPDATE = "order_status_update"
    WELCOME = "welcome"
    PASSWORD_RESET = "password_reset"
    PASSWORD_RESET_SUCCESS = "password_reset_success"
    ADMIN_ALERT = "admin_alert"


class AdminAlertType(StrEnum):
    NEW_ORDER = "new_order"
    ORDER_STATUS = "order_status"
