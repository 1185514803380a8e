from __future__ import annotations

import re

from django.core.exceptions import ValidationError
from django.core.validators import validate_email as django_validate_email

from .errors import EmailInvalidError, FullNameInvalidError, PhoneInvalidError

NIGERIA_DIAL_CODE = "234"
FULL_NAME_MAX_LENGTH = 200

_DIGITS_RE = re.compile(r"^\+?\d{7,15}$")
_SEPARATORS_RE = re.compile(r"[\s.\-()/]+")


def validate_full_name(raw: str) -> str:
    name = " ".join((raw or "").split())
    if not name:
        raise FullNameInvalidError("Please enter your name.", field="full_name")
    if len(name) > FULL_NAME_MAX_LENGTH:
        raise FullNameInvalidError(
            f"Name cannot be longer than {FULL_NAME_MAX_LENGTH} characters.", field="full_name"
        )
    return name


def normalize_phone(raw: str) -> str:
    """
    Return the number in international form.

    Local numbers ("0801 234 5678") get the Nigerian dial code; a leading
    "00" becomes "+". Anything else is returned with separators removed.
    """
    phone = _SEPARATORS_RE.sub("", (raw or "").strip())
    if phone.startswith("00"):
        return "+" + phone[2:]
    if phone.startswith("0") and len(phone) == 11:
        return f"+{NIGERIA_DIAL_CODE}{phone[1:]}"
    if phone.startswith(NIGERIA_DIAL_CODE) and len(phone) == 13:
        return "+" + phone
    return phone


def validate_phone(raw: str) -> str:
    phone = normalize_phone(raw)
    if phone and not _DIGITS_RE.match(phone):
        raise PhoneInvalidError("Please enter a valid phone number.", field="phone")
    return phone


def normalize_email(raw: str) -> str:
    return (raw or "").strip().lower()


def validate_email(raw: str) -> str:
    email = normalize_email(raw)
    if not email:
        raise EmailInvalidError("Please enter your email address.", field="email")
    try:
        django_validate_email(email)
    except ValidationError as exc:
        raise EmailInvalidError("Please enter a valid email address.", field="email") from exc
    return email
