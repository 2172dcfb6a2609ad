"""
Centralized settings and path configuration for the shop pricing package.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where the data/ folder lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists() or (parent / 'data' / 'products.csv').exists():
            return parent
    # Fallback to 4 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    data_dir: Path

    # Catalog files
    products_csv: Path
    pricing_groups_csv: Path
    manual_input_prices_csv: Path
    currencies_csv: Path
    domains_csv: Path

    # Optional files
    product_visibilities_csv: Optional[Path] = None

    # Pricing configuration (system-wide, read-only)
    input_price_type: str = 'without_vat'
    rounding_type: str = 'hundredths'

    log_level: str = 'INFO'

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the environment and the data directory layout."""
        env_dir = os.getenv('SHOP_PRICING_DATA_DIR')
        if data_dir is None:
            data_dir = Path(env_dir) if env_dir else get_project_root() / 'data'
        data_dir = Path(data_dir)

        return cls(
            data_dir=data_dir,
            products_csv=data_dir / 'products.csv',
            pricing_groups_csv=data_dir / 'pricing_groups.csv',
            manual_input_prices_csv=data_dir / 'manual_input_prices.csv',
            currencies_csv=data_dir / 'currencies.csv',
            domains_csv=data_dir / 'domains.csv',
            product_visibilities_csv=data_dir / 'product_visibilities.csv',
            input_price_type=os.getenv('SHOP_PRICING_INPUT_PRICE_TYPE', 'without_vat'),
            rounding_type=os.getenv('SHOP_PRICING_ROUNDING_TYPE', 'hundredths'),
            log_level=os.getenv('SHOP_PRICING_LOG_LEVEL', 'INFO'),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
