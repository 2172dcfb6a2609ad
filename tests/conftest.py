import os
import sys
from decimal import Decimal

import pandas as pd
import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from shop_pricing.engine.base_price import create_base_price_calculation
from shop_pricing.engine.models import PricingGroup
from shop_pricing.engine.price_calculator import ProductPriceCalculation
from shop_pricing.engine.repositories import (
    CurrencyRepository,
    ManualInputPriceRepository,
    PricingSetting,
    ProductRepository,
)

PRODUCT_COLUMNS = ['id', 'name', 'price', 'vat_percent', 'price_calculation_type',
                   'is_main_variant', 'main_variant_id', 'selling_denied', 'hidden']


def product_row(id, price, calc_type='auto', vat='21', main=False, main_variant_id='',
                selling_denied=False, hidden=False, name=None):
    return {
        'id': str(id),
        'name': name or f"Product {id}",
        'price': str(price),
        'vat_percent': str(vat),
        'price_calculation_type': calc_type,
        'is_main_variant': 'true' if main else 'false',
        'main_variant_id': str(main_variant_id),
        'selling_denied': 'true' if selling_denied else 'false',
        'hidden': 'true' if hidden else 'false',
    }


@pytest.fixture
def build_calculation():
    """
    Factory for a ProductPriceCalculation over in-memory frames.

    Domain 1 defaults to currency 1 (rate 1); domain 2 to currency 2 (rate 0.04).
    """
    def _build(products, manual_prices=None, visibilities=None,
               input_price_type='without_vat', rounding_type='hundredths'):
        product_repository = ProductRepository(
            pd.DataFrame(products, columns=PRODUCT_COLUMNS),
            pd.DataFrame(visibilities) if visibilities else None,
        )
        manual_repository = ManualInputPriceRepository(
            pd.DataFrame(manual_prices) if manual_prices else None
        )
        currency_repository = CurrencyRepository(pd.DataFrame([
            {'id': '1', 'code': 'CZK', 'exchange_rate': '1'},
            {'id': '2', 'code': 'EUR', 'exchange_rate': '0.04'},
        ]))
        pricing_setting = PricingSetting(
            pd.DataFrame([
                {'domain_id': '1', 'default_currency_id': '1', 'default_pricing_group_id': '1'},
                {'domain_id': '2', 'default_currency_id': '2', 'default_pricing_group_id': '3'},
            ]),
            input_price_type,
            rounding_type,
        )
        calculation = ProductPriceCalculation(
            base_price_calculation=create_base_price_calculation(rounding_type),
            pricing_setting=pricing_setting,
            manual_input_price_repository=manual_repository,
            currency_repository=currency_repository,
            product_repository=product_repository,
        )
        return calculation, product_repository

    return _build


@pytest.fixture
def ordinary_group():
    return PricingGroup(id=1, name="Ordinary customer", domain_id=1, coefficient=Decimal("1"))


@pytest.fixture
def partner_group():
    return PricingGroup(id=2, name="Partner", domain_id=1, coefficient=Decimal("1.1"))


SAMPLE_DATA = {
    'products.csv': (
        "id,name,price,vat_percent,price_calculation_type,is_main_variant,main_variant_id,selling_denied,hidden\n"
        "1,Road Helmet,100,21,auto,false,,false,false\n"
        "2,Team Jersey,0,21,manual,false,,false,false\n"
        "3,Cycling Shoes,0,21,auto,true,,false,false\n"
        "4,Cycling Shoes 42,150,21,auto,false,3,false,false\n"
        "5,Cycling Shoes 44,200,21,auto,false,3,false,false\n"
        "6,Cycling Shoes 46,120,21,auto,false,3,true,false\n"
    ),
    'pricing_groups.csv': (
        "id,name,domain_id,coefficient\n"
        "1,Ordinary customer,1,1\n"
        "2,Partner,1,0.9\n"
        "3,Ordinary customer,2,1\n"
    ),
    'manual_input_prices.csv': (
        "product_id,pricing_group_id,input_price\n"
        "2,1,45\n"
        "2,2,40\n"
    ),
    'currencies.csv': (
        "id,code,exchange_rate\n"
        "1,CZK,1\n"
        "2,EUR,0.04\n"
    ),
    'domains.csv': (
        "domain_id,default_currency_id,default_pricing_group_id\n"
        "1,1,1\n"
        "2,2,3\n"
    ),
    'product_visibilities.csv': (
        "product_id,domain_id,pricing_group_id,visible\n"
        "5,1,2,false\n"
    ),
}


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """A data directory holding the sample catalog, with pricing env vars cleared."""
    for var in ('SHOP_PRICING_DATA_DIR', 'SHOP_PRICING_INPUT_PRICE_TYPE',
                'SHOP_PRICING_ROUNDING_TYPE', 'SHOP_PRICING_LOG_LEVEL'):
        monkeypatch.delenv(var, raising=False)
    for name, content in SAMPLE_DATA.items():
        (tmp_path / name).write_text(content, encoding='utf-8')
    return tmp_path
