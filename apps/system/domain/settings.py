from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

TAX_RATE_KEY = "tax_rate"
SHIPPING_COST_KEY = "shipping_cost_standard"
FREE_SHIPPING_THRESHOLD_KEY = "free_shipping_threshold"
CURRENCY_SYMBOL_KEY = "currency_symbol"


@dataclass(frozen=True)
class StoreSettings:
    """Pricing inputs. `tax_rate` is a percentage (7.5 means 7.5%)."""

    tax_rate: Decimal = Decimal("7.5")
    shipping_cost_standard: Decimal = Decimal("1500")
    free_shipping_threshold: Decimal = Decimal("50000")
    currency_symbol: str = "₦"


DEFAULT_STORE_SETTINGS = StoreSettings()
