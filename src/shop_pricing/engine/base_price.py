"""
VAT arithmetic - base price normalization and coefficient application.

All rounding is half-up and happens here only; callers treat the returned
Price as final.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from .exceptions import InvalidInputPriceTypeError, InvalidRoundingTypeError
from .models import InputPriceType, Price, RoundingType

HUNDREDTH = Decimal("0.01")
ONE = Decimal("1")
HUNDRED = Decimal("100")


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 1.1 from turning into 1.100000000000000088...
    return Decimal(str(value))


class Rounding:
    """Rounds prices according to the configured rounding type."""

    def __init__(self, rounding_type=RoundingType.HUNDREDTHS):
        try:
            self.rounding_type = RoundingType(rounding_type)
        except ValueError:
            raise InvalidRoundingTypeError(f"Rounding type {rounding_type!r} is not supported")

    def round_price_with_vat(self, price: Decimal) -> Decimal:
        if self.rounding_type == RoundingType.HUNDREDTHS:
            return price.quantize(HUNDREDTH, rounding=ROUND_HALF_UP)
        elif self.rounding_type == RoundingType.FIFTIES:
            halves = (price * 2).quantize(ONE, rounding=ROUND_HALF_UP)
            return (halves / 2).quantize(HUNDREDTH, rounding=ROUND_HALF_UP)
        else:
            return price.quantize(ONE, rounding=ROUND_HALF_UP).quantize(HUNDREDTH)

    def round_price_without_vat(self, price: Decimal) -> Decimal:
        return price.quantize(HUNDREDTH, rounding=ROUND_HALF_UP)

    def round_vat_amount(self, vat_amount: Decimal) -> Decimal:
        return vat_amount.quantize(HUNDREDTH, rounding=ROUND_HALF_UP)


class PriceCalculation:
    """Plain VAT formulas."""

    def __init__(self, rounding: Rounding):
        self.rounding = rounding

    def apply_vat_percent(self, price_without_vat: Decimal, vat_percent: Decimal) -> Decimal:
        return price_without_vat * (HUNDRED + vat_percent) / HUNDRED

    def get_vat_amount_by_price_with_vat(self, price_with_vat: Decimal, vat_percent: Decimal) -> Decimal:
        return self.rounding.round_vat_amount(
            price_with_vat * vat_percent / (HUNDRED + vat_percent)
        )


class BasePriceCalculation:
    """
    Turns raw operator input into a Price and applies multiplicative coefficients.

    Both operations are pure: the same input always yields the same Price.
    """

    def __init__(self, price_calculation: PriceCalculation, rounding: Rounding):
        self.price_calculation = price_calculation
        self.rounding = rounding

    def calculate_base_price(self, input_price, input_price_type, vat_percent) -> Price:
        """Normalize a raw input price entered with or without VAT."""
        vat_percent = _to_decimal(vat_percent)
        base_price_with_vat = self._get_base_price_with_vat(
            _to_decimal(input_price), input_price_type, vat_percent
        )
        return self._price_from_price_with_vat(base_price_with_vat, vat_percent)

    def apply_coefficients(self, price: Price, vat_percent, coefficients: Iterable) -> Price:
        """
        Multiply a price by all coefficients at once.

        The product of the coefficients is taken before a single rounding
        pass, so their order does not affect the result.
        """
        vat_percent = _to_decimal(vat_percent)
        price_with_vat_before_rounding = price.price_with_vat
        for coefficient in coefficients:
            price_with_vat_before_rounding *= _to_decimal(coefficient)

        price_with_vat = self.rounding.round_price_with_vat(price_with_vat_before_rounding)
        return self._price_from_price_with_vat(price_with_vat, vat_percent)

    def _price_from_price_with_vat(self, price_with_vat: Decimal, vat_percent: Decimal) -> Price:
        vat_amount = self.price_calculation.get_vat_amount_by_price_with_vat(price_with_vat, vat_percent)
        price_without_vat = self.rounding.round_price_without_vat(price_with_vat - vat_amount)
        return Price(price_without_vat, price_with_vat)

    def _get_base_price_with_vat(self, input_price: Decimal, input_price_type, vat_percent: Decimal) -> Decimal:
        try:
            input_price_type = InputPriceType(input_price_type)
        except ValueError:
            raise InvalidInputPriceTypeError(f"Input price type {input_price_type!r} is not supported")

        if input_price_type == InputPriceType.WITH_VAT:
            return self.rounding.round_price_with_vat(input_price)
        return self.rounding.round_price_with_vat(
            self.price_calculation.apply_vat_percent(input_price, vat_percent)
        )


def create_base_price_calculation(rounding_type=RoundingType.HUNDREDTHS) -> BasePriceCalculation:
    """Wire Rounding, PriceCalculation and BasePriceCalculation together."""
    rounding = Rounding(rounding_type)
    return BasePriceCalculation(PriceCalculation(rounding), rounding)
