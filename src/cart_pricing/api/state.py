"""Process-wide engine and cart service shared by the API routers."""
from cart_pricing.engine import PricingEngine
from cart_pricing.services.cart_service import CartService

engine = PricingEngine()
cart_service = CartService(engine)
