from decimal import Decimal

import pytest

from conftest import product_row
from shop_pricing.engine.exceptions import (
    CurrencyNotFoundError,
    NestedMainVariantError,
    NoSellableVariantsError,
    UnsupportedCalculationTypeError,
)
from shop_pricing.engine.models import Price, PricingGroup, ProductPrice


def test_auto_price_applies_group_coefficient_and_currency_rate(build_calculation, partner_group):
    """100 excl. VAT, VAT 21 %, coefficient 1.1, rate 1.0 -> 110 without VAT."""
    calculation, products = build_calculation([product_row(1, 100)])

    result = calculation.calculate_price(products.get_by_id(1), partner_group)

    assert result.price_without_vat == Decimal("110.00")
    assert result.price_with_vat == Decimal("133.10")
    assert result.price_from is False


def test_auto_price_matches_base_price_with_coefficients(build_calculation, partner_group):
    calculation, products = build_calculation([product_row(1, "87.45", vat="15")])
    product = products.get_by_id(1)

    expected = calculation.base_price_calculation.apply_coefficients(
        calculation.calculate_base_price(product),
        product.vat_percent,
        [partner_group.coefficient, Decimal("1")],
    )

    assert calculation.calculate_price(product, partner_group) == ProductPrice(expected, False)


def test_auto_price_converts_to_domain_default_currency(build_calculation):
    """Domain 2 uses EUR with exchange rate 0.04 -> reversed rate 25."""
    calculation, products = build_calculation([product_row(1, 100)])
    eur_group = PricingGroup(id=3, name="Ordinary customer", domain_id=2, coefficient=Decimal("1"))

    result = calculation.calculate_price(products.get_by_id(1), eur_group)

    assert result.price_with_vat == Decimal("3025.00")
    assert result.price_without_vat == Decimal("2500.00")


def test_auto_price_with_prices_entered_including_vat(build_calculation, ordinary_group):
    calculation, products = build_calculation([product_row(1, 121)], input_price_type='with_vat')

    result = calculation.calculate_price(products.get_by_id(1), ordinary_group)

    assert result.price == Price(Decimal("100.00"), Decimal("121.00"))


def test_manual_price_without_record_is_zero(build_calculation, ordinary_group):
    calculation, products = build_calculation([product_row(2, 999, calc_type='manual')])

    result = calculation.calculate_price(products.get_by_id(2), ordinary_group)

    assert result.price_without_vat == Decimal("0")
    assert result.price_with_vat == Decimal("0")
    assert result.price_from is False


def test_manual_price_uses_record_for_pricing_group(build_calculation, ordinary_group, partner_group):
    """Manual prices ignore the product's own price and the group coefficient."""
    calculation, products = build_calculation(
        [product_row(2, 999, calc_type='manual')],
        manual_prices=[
            {'product_id': '2', 'pricing_group_id': '1', 'input_price': '45'},
            {'product_id': '2', 'pricing_group_id': '2', 'input_price': '40'},
        ],
    )
    product = products.get_by_id(2)

    ordinary = calculation.calculate_price(product, ordinary_group)
    partner = calculation.calculate_price(product, partner_group)

    assert ordinary.price == Price(Decimal("45.00"), Decimal("54.45"))
    assert partner.price == Price(Decimal("40.00"), Decimal("48.40"))
    assert ordinary.price_from is False


def test_manual_price_matches_normalized_input(build_calculation, ordinary_group):
    calculation, products = build_calculation(
        [product_row(2, 0, calc_type='manual', vat='10')],
        manual_prices=[{'product_id': '2', 'pricing_group_id': '1', 'input_price': '19.99'}],
    )

    expected = calculation.base_price_calculation.calculate_base_price(
        Decimal("19.99"), 'without_vat', Decimal("10")
    )

    assert calculation.calculate_price(products.get_by_id(2), ordinary_group).price == expected


def test_main_variant_with_equal_variant_prices_is_exact(build_calculation, ordinary_group):
    calculation, products = build_calculation([
        product_row(10, 0, main=True),
        product_row(11, 150, main_variant_id=10),
        product_row(12, 150, main_variant_id=10),
    ])

    result = calculation.calculate_price(products.get_by_id(10), ordinary_group)

    assert result.price_without_vat == Decimal("150.00")
    assert result.price_from is False


def test_main_variant_with_different_variant_prices_starts_from_minimum(build_calculation, ordinary_group):
    calculation, products = build_calculation([
        product_row(10, 0, main=True),
        product_row(11, 200, main_variant_id=10),
        product_row(12, 150, main_variant_id=10),
    ])

    result = calculation.calculate_price(products.get_by_id(10), ordinary_group)

    assert result.price_without_vat == Decimal("150.00")
    assert result.price_with_vat == Decimal("181.50")
    assert result.price_from is True


def test_main_variant_mixes_manual_and_auto_variants(build_calculation, ordinary_group):
    """A manual variant without a price counts as 0 and becomes the minimum."""
    calculation, products = build_calculation([
        product_row(10, 0, main=True),
        product_row(11, 150, main_variant_id=10),
        product_row(12, 150, calc_type='manual', main_variant_id=10),
    ])

    result = calculation.calculate_price(products.get_by_id(10), ordinary_group)

    assert result.price_without_vat == Decimal("0")
    assert result.price_from is True


def test_main_variant_ignores_unsellable_variants(build_calculation, ordinary_group, partner_group):
    calculation, products = build_calculation(
        [
            product_row(10, 0, main=True),
            product_row(11, 150, main_variant_id=10),
            product_row(12, 200, main_variant_id=10),
            product_row(13, 50, main_variant_id=10, selling_denied=True),
            product_row(14, 60, main_variant_id=10, hidden=True),
        ],
        visibilities=[
            {'product_id': '12', 'domain_id': '1', 'pricing_group_id': '2', 'visible': 'false'},
        ],
    )
    main_variant = products.get_by_id(10)

    ordinary = calculation.calculate_price(main_variant, ordinary_group)
    partner = calculation.calculate_price(main_variant, partner_group)

    assert ordinary.price_without_vat == Decimal("150.00")
    assert ordinary.price_from is True
    # Variant 12 is invisible for partners, leaving a single price
    assert partner.price_from is False


def test_main_variant_without_sellable_variants_raises(build_calculation, ordinary_group):
    calculation, products = build_calculation([
        product_row(10, 0, main=True),
        product_row(11, 150, main_variant_id=10, selling_denied=True),
    ])

    with pytest.raises(NoSellableVariantsError) as exc_info:
        calculation.calculate_price(products.get_by_id(10), ordinary_group)

    assert exc_info.value.main_variant_id == 10


def test_variant_flagged_as_main_variant_raises(build_calculation, ordinary_group):
    calculation, products = build_calculation([
        product_row(10, 0, main=True),
        product_row(11, 150, main=True, main_variant_id=10),
    ])

    with pytest.raises(NestedMainVariantError) as exc_info:
        calculation.calculate_price(products.get_by_id(10), ordinary_group)

    assert exc_info.value.product_id == 11
    assert isinstance(exc_info.value, UnsupportedCalculationTypeError)


def test_unknown_calculation_type_raises(build_calculation, ordinary_group):
    calculation, products = build_calculation([product_row(1, 100, calc_type='fixed')])

    with pytest.raises(UnsupportedCalculationTypeError) as exc_info:
        calculation.calculate_price(products.get_by_id(1), ordinary_group)

    assert exc_info.value.calculation_type == 'fixed'


def test_calculation_type_is_case_insensitive(build_calculation, ordinary_group, partner_group):
    """'AUTO' and 'Manual' in the catalog price like their lower-case forms."""
    calculation, products = build_calculation(
        [product_row(1, 100, calc_type='AUTO'), product_row(2, 999, calc_type='Manual')],
        manual_prices=[{'product_id': '2', 'pricing_group_id': '1', 'input_price': '45'}],
    )

    auto = calculation.calculate_price(products.get_by_id(1), partner_group)
    manual = calculation.calculate_price(products.get_by_id(2), ordinary_group)

    assert auto.price == Price(Decimal("110.00"), Decimal("133.10"))
    assert manual.price == Price(Decimal("45.00"), Decimal("54.45"))


def test_main_variant_finds_variants_with_float_formatted_ids(build_calculation, ordinary_group):
    """Ids exported from float columns ('10.0') still link variants to their main variant."""
    calculation, products = build_calculation([
        product_row(10, 0, main=True),
        product_row(11, 150, main_variant_id='10.0'),
        product_row(12, 200, main_variant_id='10.0'),
    ])

    result = calculation.calculate_price(products.get_by_id(10), ordinary_group)

    assert result.price_without_vat == Decimal("150.00")
    assert result.price_from is True


def test_unknown_currency_is_fatal(build_calculation):
    calculation, products = build_calculation([product_row(1, 100)])
    calculation.pricing_setting.domains.loc[:, 'default_currency_id'] = '99'

    with pytest.raises(CurrencyNotFoundError):
        calculation.calculate_price(products.get_by_id(1), PricingGroup(1, "Ordinary", 1))


def test_calculation_is_repeatable(build_calculation, partner_group):
    calculation, products = build_calculation([
        product_row(10, 0, main=True),
        product_row(11, 150, main_variant_id=10),
        product_row(12, 175, main_variant_id=10),
    ])
    main_variant = products.get_by_id(10)

    first = calculation.calculate_price(main_variant, partner_group)
    second = calculation.calculate_price(main_variant, partner_group)

    assert first == second
    assert products.get_by_id(10) == main_variant
