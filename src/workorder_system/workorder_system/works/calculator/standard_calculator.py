from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal
from typing import Optional

from .base import CostCalculator


class StandardCostCalculator(CostCalculator):
    """Standard rule: quantity x unit price x worker ratio, truncated to an integer."""

    def cost(self, *, quantity: int, unit_price: int, unit_price_ratio: Optional[float]) -> int:
        ratio = Decimal(str(unit_price_ratio)) if unit_price_ratio else Decimal(1)
        value = Decimal(int(quantity)) * Decimal(int(unit_price)) * ratio
        return int(value.to_integral_value(rounding=ROUND_FLOOR))
