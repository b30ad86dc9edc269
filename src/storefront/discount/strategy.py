"""Pluggable ``subtotal -> total`` discounts applied at checkout.

Every strategy returns a total in ``[0, subtotal]`` for a non-negative
subtotal.
"""

import math
from abc import ABC, abstractmethod

from storefront.errors import InvalidDiscountError


class DiscountStrategy(ABC):
    """Interface for checkout discounts."""

    @abstractmethod
    def apply(self, subtotal: float) -> float:
        """Return the amount to charge for ``subtotal``."""
        ...

    @abstractmethod
    def display_name(self) -> str:
        """Short label shown next to the total."""
        ...


class NoDiscount(DiscountStrategy):
    def apply(self, subtotal: float) -> float:
        if subtotal < 0:
            return 0.0
        return subtotal

    def display_name(self) -> str:
        return "No discount"

    def __repr__(self):
        return "NoDiscount()"


class PercentageDiscount(DiscountStrategy):
    """Takes ``percent`` percent off the subtotal. ``percent`` must lie in ``[0, 100]``."""

    def __init__(self, percent: float):
        if isinstance(percent, bool) or not isinstance(percent, int | float):
            raise InvalidDiscountError(percent, "percent must be a number")
        if math.isnan(percent) or percent < 0.0 or percent > 100.0:
            raise InvalidDiscountError(percent, "percent must be between 0 and 100")
        self._percent = float(percent)

    @property
    def percent(self) -> float:
        return self._percent

    def apply(self, subtotal: float) -> float:
        if subtotal <= 0:
            return 0.0
        total = subtotal * (1.0 - self._percent / 100.0)
        return min(subtotal, max(0.0, total))

    def display_name(self) -> str:
        if self._percent == 0.0:
            return "No discount"
        if self._percent.is_integer():
            return f"{int(self._percent)}% off"
        return f"{self._percent}% off"

    def __repr__(self):
        return f"PercentageDiscount({self._percent})"


def discount_for(percent: float) -> DiscountStrategy:
    """Pick the strategy for a configured percentage: none for zero, a percentage otherwise."""
    if percent == 0:
        return NoDiscount()
    return PercentageDiscount(percent)
