from __future__ import annotations

import secrets
import string
import time

from django.utils.text import slugify

from apps.catalog.domain.sku import product_sku_base, variation_sku_base, with_counter
from apps.catalog.models import Product, ProductVariation

_MAX_COUNTER = 99


def _now_ms() -> int:
    return int(time.time() * 1000)


def _random_tail(length: int) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def sku_taken(sku: str, *, exclude_product_id=None, exclude_variation_id=None) -> bool:
    products = Product.objects.filter(sku=sku)
    if exclude_product_id is not None:
        products = products.exclude(pk=exclude_product_id)
    variations = ProductVariation.objects.filter(sku=sku)
    if exclude_variation_id is not None:
        variations = variations.exclude(pk=exclude_variation_id)
    return products.exists() or variations.exists()


def _unique_from(base: str, tail_length: int) -> str:
    candidate = base
    for counter in range(1, _MAX_COUNTER + 1):
        if not sku_taken(candidate):
            return candidate
        candidate = with_counter(base, counter)
    return f"{base}-{_random_tail(tail_length)}"


def generate_product_sku(*, name: str, category=None) -> str:
    base = product_sku_base(
        name=name,
        category_name=getattr(category, "name", None),
        stamp_ms=_now_ms(),
    )
    return _unique_from(base, 6)


def generate_variation_sku(*, product: Product, options) -> str:
    ordered = sorted(options, key=lambda o: (o.variation_type.sort_order, o.sort_order, o.pk))
    pairs = [(option.variation_type.name, option.name) for option in ordered]
    base = variation_sku_base(product_sku=product.sku, option_pairs=pairs, stamp_ms=_now_ms())
    return _unique_from(base, 4)


def unique_slug(model, value: str, *, exclude_pk=None) -> str:
    base = slugify(value) or "item"
    base = base[:240]
    candidate = base
    counter = 1
    while True:
        qs = model.objects.filter(slug=candidate)
        if exclude_pk is not None:
            qs = qs.exclude(pk=exclude_pk)
        if not qs.exists():
            return candidate
        candidate = f"{base}-{counter}"
        counter += 1
