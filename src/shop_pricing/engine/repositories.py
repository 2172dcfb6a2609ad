"""
Read-only stores backed by pandas DataFrames.

Every frame is kept as strings (read with dtype=str, stripped) and rows are
converted to frozen records on lookup, so callers never see pandas types.
"""
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

import pandas as pd

from .exceptions import (
    CurrencyNotFoundError,
    DomainNotFoundError,
    InvalidExchangeRateError,
    InvalidInputPriceTypeError,
    InvalidRoundingTypeError,
    PricingGroupNotFoundError,
    ProductNotFoundError,
)
from .models import (
    Currency,
    DomainConfig,
    InputPriceType,
    ManualInputPrice,
    PricingGroup,
    Product,
    RoundingType,
)

TRUE_VALUES = {'1', 'true', 'yes', 'y', 't'}


def load_csv(path: Path, columns: list[str] = None) -> pd.DataFrame:
    """Read a CSV as strings with stripped headers and cells; missing file -> empty frame."""
    path = Path(path)
    if not path.exists():
        return pd.DataFrame(columns=columns or [])
    df = pd.read_csv(path, dtype=str).fillna('')
    return normalize_frame(df)


def normalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Cast every cell to a stripped string."""
    df = df.copy().fillna('')
    df.columns = [str(c).strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def _require_columns(df: pd.DataFrame, required: list[str], name: str):
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{name} is missing required columns: {', '.join(missing)}")


def _as_bool(value) -> bool:
    return str(value).strip().lower() in TRUE_VALUES


def _flag(series: pd.Series) -> pd.Series:
    """Boolean mask from a column of truthy strings."""
    return series.map(_as_bool).astype(bool)


def _as_int(value) -> Optional[int]:
    value = str(value).strip()
    if value in ('', 'nan', 'None'):
        return None
    return int(float(value))


def _normalize_ids(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """Rewrite id cells like '10.0' or '01' to their canonical integer string."""
    for col in columns:
        if col in df.columns:
            df[col] = df[col].map(lambda v: '' if _as_int(v) is None else str(_as_int(v)))
    return df


def _as_decimal(value, default: str = '0') -> Decimal:
    value = str(value).strip()
    if value in ('', 'nan', 'None'):
        value = default
    try:
        return Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Invalid decimal value {value!r}")


class ProductRepository:
    """Products, including main variant → variant relations by id."""

    COLUMNS = ['id', 'name', 'price', 'vat_percent', 'price_calculation_type',
               'is_main_variant', 'main_variant_id', 'selling_denied', 'hidden']
    VISIBILITY_COLUMNS = ['product_id', 'domain_id', 'pricing_group_id', 'visible']

    def __init__(self, products: pd.DataFrame, visibilities: Optional[pd.DataFrame] = None):
        products = normalize_frame(products)
        _require_columns(products, ['id', 'price', 'vat_percent'], 'products')
        for col in self.COLUMNS:
            if col not in products.columns:
                products[col] = ''
        self.products = _normalize_ids(products, ['id', 'main_variant_id'])

        if visibilities is None or visibilities.empty:
            visibilities = pd.DataFrame(columns=self.VISIBILITY_COLUMNS)
        else:
            visibilities = normalize_frame(visibilities)
            _require_columns(visibilities, self.VISIBILITY_COLUMNS, 'product visibilities')
        self.visibilities = _normalize_ids(visibilities, ['product_id', 'domain_id', 'pricing_group_id'])

    @classmethod
    def from_csv(cls, products_path: Path, visibilities_path: Optional[Path] = None) -> 'ProductRepository':
        visibilities = load_csv(visibilities_path) if visibilities_path else None
        return cls(pd.read_csv(products_path, dtype=str), visibilities)

    @staticmethod
    def _to_product(row) -> Product:
        return Product(
            id=int(row['id']),
            name=row['name'],
            price=_as_decimal(row['price']),
            vat_percent=_as_decimal(row['vat_percent']),
            price_calculation_type=row['price_calculation_type'].lower() or 'auto',
            is_main_variant=_as_bool(row['is_main_variant']),
            main_variant_id=_as_int(row['main_variant_id']),
            selling_denied=_as_bool(row['selling_denied']),
            hidden=_as_bool(row['hidden']),
        )

    def get_by_id(self, product_id: int) -> Product:
        match = self.products[self.products['id'] == str(product_id)]
        if match.empty:
            raise ProductNotFoundError(product_id)
        return self._to_product(match.iloc[0])

    def get_all(self) -> list[Product]:
        return [self._to_product(row) for _, row in self.products.iterrows()]

    def get_all_sellable_variants_by_main_variant(
        self,
        main_variant: Product,
        domain_id: int,
        pricing_group: PricingGroup,
    ) -> list[Product]:
        """
        Variants of a main variant that can be sold in the given scope.

        A variant is sellable when it is neither selling-denied nor hidden and
        is not marked invisible for (domain, pricing group).
        """
        df = self.products
        variants = df[df['main_variant_id'] == str(main_variant.id)]
        variants = variants[
            ~_flag(variants['selling_denied']) & ~_flag(variants['hidden'])
        ]

        vis = self.visibilities
        invisible_ids = vis[
            (vis['domain_id'] == str(domain_id))
            & (vis['pricing_group_id'] == str(pricing_group.id))
            & ~_flag(vis['visible'])
        ]['product_id'].unique()
        if len(invisible_ids) > 0:
            variants = variants[~variants['id'].isin(invisible_ids)]

        return [self._to_product(row) for _, row in variants.iterrows()]


class PricingGroupRepository:
    COLUMNS = ['id', 'name', 'domain_id', 'coefficient']

    def __init__(self, pricing_groups: pd.DataFrame):
        pricing_groups = normalize_frame(pricing_groups)
        _require_columns(pricing_groups, ['id', 'domain_id'], 'pricing groups')
        for col in self.COLUMNS:
            if col not in pricing_groups.columns:
                pricing_groups[col] = ''
        self.pricing_groups = _normalize_ids(pricing_groups, ['id', 'domain_id'])

    @classmethod
    def from_csv(cls, path: Path) -> 'PricingGroupRepository':
        return cls(pd.read_csv(path, dtype=str))

    @staticmethod
    def _to_pricing_group(row) -> PricingGroup:
        return PricingGroup(
            id=int(row['id']),
            name=row['name'],
            domain_id=int(row['domain_id']),
            coefficient=_as_decimal(row['coefficient'], default='1'),
        )

    def get_by_id(self, pricing_group_id: int) -> PricingGroup:
        match = self.pricing_groups[self.pricing_groups['id'] == str(pricing_group_id)]
        if match.empty:
            raise PricingGroupNotFoundError(pricing_group_id)
        return self._to_pricing_group(match.iloc[0])

    def get_all(self) -> list[PricingGroup]:
        return [self._to_pricing_group(row) for _, row in self.pricing_groups.iterrows()]

    def get_all_by_domain_id(self, domain_id: int) -> list[PricingGroup]:
        match = self.pricing_groups[self.pricing_groups['domain_id'] == str(domain_id)]
        return [self._to_pricing_group(row) for _, row in match.iterrows()]


class ManualInputPriceRepository:
    COLUMNS = ['product_id', 'pricing_group_id', 'input_price']

    def __init__(self, manual_prices: Optional[pd.DataFrame] = None):
        if manual_prices is None or manual_prices.empty:
            manual_prices = pd.DataFrame(columns=self.COLUMNS)
        else:
            manual_prices = normalize_frame(manual_prices)
            _require_columns(manual_prices, self.COLUMNS, 'manual input prices')
        self.manual_prices = _normalize_ids(manual_prices, ['product_id', 'pricing_group_id'])

    @classmethod
    def from_csv(cls, path: Path) -> 'ManualInputPriceRepository':
        return cls(load_csv(path, cls.COLUMNS))

    def find_by_product_and_pricing_group(
        self,
        product: Product,
        pricing_group: PricingGroup,
    ) -> Optional[ManualInputPrice]:
        df = self.manual_prices
        match = df[
            (df['product_id'] == str(product.id))
            & (df['pricing_group_id'] == str(pricing_group.id))
        ]
        if match.empty:
            return None
        row = match.iloc[0]
        return ManualInputPrice(
            product_id=product.id,
            pricing_group_id=pricing_group.id,
            input_price=_as_decimal(row['input_price']),
        )


class CurrencyRepository:
    COLUMNS = ['id', 'code', 'exchange_rate']

    def __init__(self, currencies: pd.DataFrame):
        currencies = normalize_frame(currencies)
        _require_columns(currencies, self.COLUMNS, 'currencies')
        self.currencies = _normalize_ids(currencies, ['id'])

    @classmethod
    def from_csv(cls, path: Path) -> 'CurrencyRepository':
        return cls(pd.read_csv(path, dtype=str))

    def get_by_id(self, currency_id: int) -> Currency:
        match = self.currencies[self.currencies['id'] == str(currency_id)]
        if match.empty:
            raise CurrencyNotFoundError(currency_id)
        row = match.iloc[0]
        return Currency(
            id=int(row['id']),
            code=row['code'],
            exchange_rate=self._parse_exchange_rate(currency_id, row['exchange_rate']),
        )

    @staticmethod
    def _parse_exchange_rate(currency_id, raw: str) -> Decimal:
        try:
            exchange_rate = Decimal(raw)
        except InvalidOperation:
            raise InvalidExchangeRateError(currency_id, raw)
        if not exchange_rate.is_finite() or exchange_rate <= 0:
            raise InvalidExchangeRateError(currency_id, raw)
        return exchange_rate


class PricingSetting:
    """System-wide pricing configuration plus per-domain defaults."""

    COLUMNS = ['domain_id', 'default_currency_id', 'default_pricing_group_id']

    def __init__(
        self,
        domains: pd.DataFrame,
        input_price_type=InputPriceType.WITHOUT_VAT,
        rounding_type=RoundingType.HUNDREDTHS,
    ):
        try:
            self.input_price_type = InputPriceType(input_price_type)
        except ValueError:
            raise InvalidInputPriceTypeError(f"Input price type {input_price_type!r} is not supported")
        try:
            self.rounding_type = RoundingType(rounding_type)
        except ValueError:
            raise InvalidRoundingTypeError(f"Rounding type {rounding_type!r} is not supported")

        domains = normalize_frame(domains)
        _require_columns(domains, ['domain_id', 'default_currency_id'], 'domains')
        if 'default_pricing_group_id' not in domains.columns:
            domains['default_pricing_group_id'] = ''
        self.domains = _normalize_ids(domains, self.COLUMNS)

    @classmethod
    def from_csv(cls, path: Path, input_price_type, rounding_type) -> 'PricingSetting':
        return cls(pd.read_csv(path, dtype=str), input_price_type, rounding_type)

    def get_input_price_type(self) -> InputPriceType:
        return self.input_price_type

    def get_rounding_type(self) -> RoundingType:
        return self.rounding_type

    def get_domain_config(self, domain_id: int) -> DomainConfig:
        match = self.domains[self.domains['domain_id'] == str(domain_id)]
        if match.empty:
            raise DomainNotFoundError(domain_id)
        row = match.iloc[0]
        return DomainConfig(
            domain_id=int(row['domain_id']),
            default_currency_id=int(row['default_currency_id']),
            default_pricing_group_id=_as_int(row['default_pricing_group_id']),
        )

    def get_domain_default_currency_id_by_domain_id(self, domain_id: int) -> int:
        return self.get_domain_config(domain_id).default_currency_id

    def get_default_pricing_group_id_by_domain_id(self, domain_id: int) -> Optional[int]:
        return self.get_domain_config(domain_id).default_pricing_group_id
