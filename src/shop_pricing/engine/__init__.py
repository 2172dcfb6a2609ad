"""Engine subpackage - product price calculation and its stores."""
from .pricing_engine import PricingEngine
from .price_calculator import ProductPriceCalculation
from .models import Product, PricingGroup, Price, ProductPrice, PriceCalculationType, InputPriceType

__all__ = [
    'PricingEngine', 'ProductPriceCalculation',
    'Product', 'PricingGroup', 'Price', 'ProductPrice', 'PriceCalculationType', 'InputPriceType',
]
