"""
Product price calculation.

Resolution order:
1. Main variant -> lowest price among its sellable variants
2. Auto pricing -> base price x pricing group coefficient x currency rate
3. Manual pricing -> operator-entered price for the pricing group (0 if none)
"""
import logging
from decimal import Decimal

from .base_price import BasePriceCalculation
from .exceptions import (
    NestedMainVariantError,
    NoSellableVariantsError,
    UnsupportedCalculationTypeError,
)
from .models import Price, PriceCalculationType, PricingGroup, Product, ProductPrice
from .pricing_service import PricingService
from .repositories import (
    CurrencyRepository,
    ManualInputPriceRepository,
    PricingSetting,
    ProductRepository,
)

logger = logging.getLogger(__name__)


class ProductPriceCalculation:
    """
    Calculates the price of a product for a pricing group.

    Holds no state between calls; every call reads the stores and builds a
    fresh ProductPrice.
    """

    def __init__(
        self,
        base_price_calculation: BasePriceCalculation,
        pricing_setting: PricingSetting,
        manual_input_price_repository: ManualInputPriceRepository,
        currency_repository: CurrencyRepository,
        product_repository: ProductRepository,
        pricing_service: PricingService = None,
    ):
        self.base_price_calculation = base_price_calculation
        self.pricing_setting = pricing_setting
        self.manual_input_price_repository = manual_input_price_repository
        self.currency_repository = currency_repository
        self.product_repository = product_repository
        self.pricing_service = pricing_service or PricingService()

    def calculate_price(self, product: Product, pricing_group: PricingGroup) -> ProductPrice:
        if product.is_main_variant:
            return self._calculate_main_variant_price(product, pricing_group)

        try:
            calculation_type = PriceCalculationType(product.price_calculation_type)
        except ValueError:
            raise UnsupportedCalculationTypeError(product.price_calculation_type)

        if calculation_type == PriceCalculationType.AUTO:
            return self._calculate_base_price_for_pricing_group_auto(product, pricing_group)
        return self._calculate_base_price_for_pricing_group_manual(product, pricing_group)

    def calculate_base_price(self, product: Product) -> Price:
        """Product's stored price normalized by the configured input price type."""
        return self.base_price_calculation.calculate_base_price(
            product.price,
            self.pricing_setting.get_input_price_type(),
            product.vat_percent,
        )

    def _calculate_main_variant_price(self, main_variant: Product, pricing_group: PricingGroup) -> ProductPrice:
        variants = self.product_repository.get_all_sellable_variants_by_main_variant(
            main_variant,
            pricing_group.domain_id,
            pricing_group,
        )
        if len(variants) == 0:
            raise NoSellableVariantsError(main_variant.id)

        variant_prices = []
        for variant in variants:
            # Recursion stops here: variants must not be main variants themselves
            if variant.is_main_variant:
                raise NestedMainVariantError(variant.id, main_variant.id)
            variant_prices.append(self.calculate_price(variant, pricing_group))

        min_variant_price = self.pricing_service.get_minimum_price(variant_prices)
        price_from = self.pricing_service.are_prices_different(variant_prices)

        logger.debug(
            "Main variant %s: %d variants, min %s, from=%s",
            main_variant.id, len(variants), min_variant_price.price_without_vat, price_from,
        )
        return ProductPrice(min_variant_price, price_from)

    def _calculate_base_price_for_pricing_group_manual(
        self,
        product: Product,
        pricing_group: PricingGroup,
    ) -> ProductPrice:
        manual_input_price = self.manual_input_price_repository.find_by_product_and_pricing_group(
            product, pricing_group
        )
        if manual_input_price is not None:
            input_price = manual_input_price.input_price
        else:
            input_price = Decimal("0")
            logger.debug(
                "No manual price for product %s in pricing group %s, using 0",
                product.id, pricing_group.id,
            )

        price = self.base_price_calculation.calculate_base_price(
            input_price,
            self.pricing_setting.get_input_price_type(),
            product.vat_percent,
        )
        return ProductPrice(price, False)

    def _calculate_base_price_for_pricing_group_auto(
        self,
        product: Product,
        pricing_group: PricingGroup,
    ) -> ProductPrice:
        base_price = self.calculate_base_price(product)

        price = self.base_price_calculation.apply_coefficients(
            base_price,
            product.vat_percent,
            [pricing_group.coefficient, self._get_domain_default_currency_reversed_exchange_rate(pricing_group)],
        )
        return ProductPrice(price, False)

    def _get_domain_default_currency_reversed_exchange_rate(self, pricing_group: PricingGroup) -> Decimal:
        domain_default_currency_id = self.pricing_setting.get_domain_default_currency_id_by_domain_id(
            pricing_group.domain_id
        )
        currency = self.currency_repository.get_by_id(domain_default_currency_id)
        return currency.reversed_exchange_rate
