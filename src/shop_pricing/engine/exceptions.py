"""Errors raised by the price calculation and its stores."""


class PricingError(Exception):
    """Base class for pricing failures."""


class UnsupportedCalculationTypeError(PricingError):
    """A product's price calculation type is neither auto nor manual."""

    def __init__(self, calculation_type, message: str = None):
        self.calculation_type = calculation_type
        super().__init__(
            message or f"Product price calculation type {calculation_type!r} is not supported"
        )


class NestedMainVariantError(UnsupportedCalculationTypeError):
    """A variant is itself flagged as a main variant."""

    def __init__(self, product_id: int, main_variant_id: int = None):
        self.product_id = product_id
        self.main_variant_id = main_variant_id
        super().__init__(
            "main_variant",
            f"Variant ID = {product_id} of main variant ID = {main_variant_id} "
            "is itself a main variant",
        )


class NoSellableVariantsError(PricingError):
    """A main variant has no sellable variants for the requested scope."""

    def __init__(self, main_variant_id: int):
        self.main_variant_id = main_variant_id
        super().__init__(f"Main variant ID = {main_variant_id} has no sellable variants.")


class InvalidInputPriceTypeError(PricingError):
    """The configured input price type is unknown."""


class InvalidRoundingTypeError(PricingError):
    """The configured rounding type is unknown."""


class EntityNotFoundError(PricingError):
    """A referenced record does not exist."""

    entity = "Entity"

    def __init__(self, entity_id):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} with ID {entity_id} not found")


class ProductNotFoundError(EntityNotFoundError):
    entity = "Product"


class PricingGroupNotFoundError(EntityNotFoundError):
    entity = "Pricing group"


class CurrencyNotFoundError(EntityNotFoundError):
    entity = "Currency"


class DomainNotFoundError(EntityNotFoundError):
    entity = "Domain"


class InvalidExchangeRateError(PricingError):
    """A currency has a missing, unparseable or non-positive exchange rate."""

    def __init__(self, currency_id, exchange_rate):
        self.currency_id = currency_id
        self.exchange_rate = exchange_rate
        super().__init__(f"Currency with ID {currency_id} has invalid exchange rate {exchange_rate!r}")
