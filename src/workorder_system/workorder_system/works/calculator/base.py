from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class CostCalculator(ABC):
    """Calculator interface (Strategy Pattern for work cost)."""

    @abstractmethod
    def cost(self, *, quantity: int, unit_price: int, unit_price_ratio: Optional[float]) -> int:
        raise NotImplementedError
