"""Engine subpackage - core pricing logic and sale resolution."""
from .pricing_engine import PricingEngine, price_parcel, price_cart
from .sale_schedule import resolve_active_sales
from .models import Item, BulkPricing, Parcel, Cart, Request, Result

__all__ = [
    'PricingEngine', 'price_parcel', 'price_cart', 'resolve_active_sales',
    'Item', 'BulkPricing', 'Parcel', 'Cart', 'Request', 'Result',
]
