"""
Pricing Engine - loads the catalog stores and exposes id-based price lookups.

Wraps ProductPriceCalculation with:
- CSV loading driven by Settings
- Pricing group resolution for customers (own group or domain default)
- Prices for every pricing group of a product
- Per-pricing-group price lists as DataFrames
"""
import logging
from typing import Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from .base_price import create_base_price_calculation
from .exceptions import NoSellableVariantsError, PricingError, UnsupportedCalculationTypeError
from .models import PricingGroup, ProductPrice
from .price_calculator import ProductPriceCalculation
from .pricing_service import PricingService
from .repositories import (
    CurrencyRepository,
    ManualInputPriceRepository,
    PricingGroupRepository,
    PricingSetting,
    ProductRepository,
)

logger = logging.getLogger(__name__)

PRICE_LIST_COLUMNS = ['product_id', 'name', 'price_without_vat', 'price_with_vat', 'vat_amount', 'price_from']


class PricingEngine:
    """
    Entry point for product pricing backed by the CSV data directory.

    Resolution for a customer:
    1. Customer's own pricing group
    2. Domain default pricing group (anonymous customers)
    3. ProductPriceCalculation for (product, pricing group)
    """

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize engine with catalog, pricing groups, currencies and domains."""
        self.settings = settings or get_settings()

        for path in (
            self.settings.products_csv,
            self.settings.pricing_groups_csv,
            self.settings.currencies_csv,
            self.settings.domains_csv,
        ):
            if not path.exists():
                raise FileNotFoundError(f"{path.name} not found at {path}.")

        self.product_repository = ProductRepository.from_csv(
            self.settings.products_csv,
            self.settings.product_visibilities_csv,
        )
        self.pricing_group_repository = PricingGroupRepository.from_csv(self.settings.pricing_groups_csv)
        self.manual_input_price_repository = ManualInputPriceRepository.from_csv(
            self.settings.manual_input_prices_csv
        )
        self.currency_repository = CurrencyRepository.from_csv(self.settings.currencies_csv)
        self.pricing_setting = PricingSetting.from_csv(
            self.settings.domains_csv,
            self.settings.input_price_type,
            self.settings.rounding_type,
        )

        self.calculation = ProductPriceCalculation(
            base_price_calculation=create_base_price_calculation(self.pricing_setting.get_rounding_type()),
            pricing_setting=self.pricing_setting,
            manual_input_price_repository=self.manual_input_price_repository,
            currency_repository=self.currency_repository,
            product_repository=self.product_repository,
            pricing_service=PricingService(),
        )

        logger.info(
            "Pricing data loaded from %s: %d products, %d pricing groups",
            self.settings.data_dir,
            len(self.product_repository.products),
            len(self.pricing_group_repository.pricing_groups),
        )

    def reload_data(self):
        """Reload all CSV data from disk."""
        self.__init__(self.settings)

    def calculate_price(self, product_id: int, pricing_group_id: int) -> ProductPrice:
        product = self.product_repository.get_by_id(product_id)
        pricing_group = self.pricing_group_repository.get_by_id(pricing_group_id)
        return self.calculation.calculate_price(product, pricing_group)

    def get_pricing_group_for_user(self, domain_id: int, user=None) -> PricingGroup:
        """
        Resolve the pricing group a customer sees on a domain.

        Falls back to the domain default for anonymous customers and for
        customers without a pricing group.
        """
        pricing_group_id = getattr(user, 'pricing_group_id', None) if user is not None else None
        if pricing_group_id is None:
            pricing_group_id = self.pricing_setting.get_default_pricing_group_id_by_domain_id(domain_id)
            if pricing_group_id is None:
                raise PricingError(f"Domain {domain_id} has no default pricing group")
        return self.pricing_group_repository.get_by_id(pricing_group_id)

    def calculate_price_for_user(self, product_id: int, domain_id: int, user=None) -> ProductPrice:
        pricing_group = self.get_pricing_group_for_user(domain_id, user)
        product = self.product_repository.get_by_id(product_id)
        return self.calculation.calculate_price(product, pricing_group)

    def calculate_prices_for_all_pricing_groups(self, product_id: int) -> dict[int, ProductPrice]:
        """Price of one product in every pricing group, keyed by pricing group id."""
        product = self.product_repository.get_by_id(product_id)
        return {
            pricing_group.id: self.calculation.calculate_price(product, pricing_group)
            for pricing_group in self.pricing_group_repository.get_all()
        }

    def price_list(self, pricing_group_id: int) -> pd.DataFrame:
        """
        Prices of all listable products for a pricing group.

        Variants are priced through their main variant and are not listed on
        their own. Products whose price cannot be calculated because of bad
        catalog data are logged and left out.
        """
        pricing_group = self.pricing_group_repository.get_by_id(pricing_group_id)

        rows = []
        for product in self.product_repository.get_all():
            if product.is_variant:
                continue
            try:
                product_price = self.calculation.calculate_price(product, pricing_group)
            except (UnsupportedCalculationTypeError, NoSellableVariantsError) as e:
                logger.warning("Product %s excluded from price list: %s", product.id, e)
                continue

            rows.append({"product_id": product.id, "name": product.name, **product_price.to_dict()})

        return pd.DataFrame(rows, columns=PRICE_LIST_COLUMNS)
