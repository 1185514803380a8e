from __future__ import annotations

import secrets
import time

PREFIX = "FC"


def generate_order_number(*, now_ms: int | None = None, random_digits: int | None = None) -> str:
    """`FC` + last 8 digits of the epoch-millisecond clock + 3 random digits."""
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    tail = secrets.randbelow(1000) if random_digits is None else random_digits
    return f"{PREFIX}{str(now_ms)[-8:].zfill(8)}{tail:03d}"
