"""Helpers over a set of computed product prices."""
from typing import Sequence

from .models import Price, ProductPrice


def _as_price(price) -> Price:
    return price.price if isinstance(price, ProductPrice) else price


class PricingService:
    """Minimum-price selection and range detection."""

    def get_minimum_price(self, prices: Sequence) -> Price:
        """
        Lowest price compared by price without VAT.

        On ties the first of the equal prices wins.
        """
        if len(prices) == 0:
            raise ValueError("Array of prices can not be empty.")

        minimum = None
        for price in map(_as_price, prices):
            if minimum is None or price.price_without_vat < minimum.price_without_vat:
                minimum = price
        return minimum

    def are_prices_different(self, prices: Sequence) -> bool:
        """True when not all prices are numerically equal (with and without VAT)."""
        if len(prices) == 0:
            raise ValueError("Array of prices can not be empty.")

        first, *rest = [_as_price(p) for p in prices]
        for price in rest:
            if (price.price_without_vat != first.price_without_vat
                    or price.price_with_vat != first.price_with_vat):
                return True
        return False
