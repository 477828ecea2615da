"""Services package for the train ticket estimator."""

from .price_estimator import (
    get_price_estimator,
    PriceEstimator
)
from .price_lookup import (
    get_price_lookup,
    ApiPriceLookup,
    DatabasePriceLookup,
    PriceLookupInterface
)

__all__ = [
    'get_price_estimator',
    'PriceEstimator',
    'get_price_lookup',
    'ApiPriceLookup',
    'DatabasePriceLookup',
    'PriceLookupInterface'
]
