"""
Data models for the price calculation.

Entities are plain frozen dataclasses resolved by id through the repositories;
none of them hold references to other entities.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class PriceCalculationType(str, Enum):
    """How a non-main-variant product gets its price."""
    AUTO = "auto"
    MANUAL = "manual"


class InputPriceType(str, Enum):
    """Whether operators enter prices including or excluding VAT."""
    WITH_VAT = "with_vat"
    WITHOUT_VAT = "without_vat"


class RoundingType(str, Enum):
    """Rounding applied to prices including VAT."""
    HUNDREDTHS = "hundredths"
    FIFTIES = "fifties"
    INTEGER = "integer"


@dataclass(frozen=True)
class Product:
    """A catalog product as stored."""
    id: int
    name: str
    price: Decimal
    vat_percent: Decimal
    # Raw stored value; persisted data may carry values outside PriceCalculationType
    price_calculation_type: str = PriceCalculationType.AUTO.value
    is_main_variant: bool = False
    main_variant_id: Optional[int] = None
    selling_denied: bool = False
    hidden: bool = False

    @property
    def is_variant(self) -> bool:
        return self.main_variant_id is not None


@dataclass(frozen=True)
class PricingGroup:
    """A customer pricing group on one domain."""
    id: int
    name: str
    domain_id: int
    coefficient: Decimal = Decimal("1")


@dataclass(frozen=True)
class ManualInputPrice:
    """Operator-entered price for a (product, pricing group) pair."""
    product_id: int
    pricing_group_id: int
    input_price: Decimal


@dataclass(frozen=True)
class Currency:
    id: int
    code: str
    exchange_rate: Decimal

    @property
    def reversed_exchange_rate(self) -> Decimal:
        """Factor converting from the default currency basis."""
        return Decimal(1) / self.exchange_rate


@dataclass(frozen=True)
class DomainConfig:
    """Per-domain pricing configuration."""
    domain_id: int
    default_currency_id: int
    default_pricing_group_id: Optional[int] = None


@dataclass(frozen=True)
class Price:
    """A price with and without VAT."""
    price_without_vat: Decimal
    price_with_vat: Decimal

    @property
    def vat_amount(self) -> Decimal:
        return self.price_with_vat - self.price_without_vat


@dataclass(frozen=True)
class ProductPrice:
    """
    Result of a product price calculation.

    price_from is True when the price is the lowest of a range
    ("price starting from X").
    """
    price: Price
    price_from: bool = False

    @property
    def price_without_vat(self) -> Decimal:
        return self.price.price_without_vat

    @property
    def price_with_vat(self) -> Decimal:
        return self.price.price_with_vat

    @property
    def vat_amount(self) -> Decimal:
        return self.price.vat_amount

    def to_dict(self) -> dict:
        """Flat dict form, used for price list rows."""
        return {
            "price_without_vat": self.price_without_vat,
            "price_with_vat": self.price_with_vat,
            "vat_amount": self.vat_amount,
            "price_from": self.price_from,
        }
