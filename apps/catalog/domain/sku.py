from __future__ import annotations

import re

DEFAULT_CATEGORY_CODE = "GEN"

_NON_ALNUM = re.compile(r"[^A-Z0-9]")


def code_from(text: str | None, length: int = 3, pad: str = "X") -> str:
    cleaned = _NON_ALNUM.sub("", (text or "").upper())[:length]
    return cleaned.ljust(length, pad) if pad else cleaned


def product_sku_base(*, name: str, category_name: str | None, stamp_ms: int) -> str:
    """`CAT-NAM-123456`: category code, name code and the last six digits of a millisecond stamp."""
    category_code = code_from(category_name) if category_name else DEFAULT_CATEGORY_CODE
    return f"{category_code}-{code_from(name)}-{str(stamp_ms)[-6:]}"


def variation_suffix(option_pairs) -> str:
    """`option_pairs` is an ordered iterable of (type_name, option_name)."""
    return "-".join(
        f"{code_from(type_name, 2, pad='')}{code_from(option_name, 2, pad='')}"
        for type_name, option_name in option_pairs
    )


def variation_sku_base(*, product_sku: str, option_pairs, stamp_ms: int) -> str:
    suffix = variation_suffix(option_pairs)
    parts = [product_sku]
    if suffix:
        parts.append(suffix)
    parts.append(str(stamp_ms)[-4:])
    return "-".join(parts)


def with_counter(base: str, counter: int) -> str:
    return f"{base}-{counter:02d}"
