"""
Cart Service - In-memory cart storage and pricing of stored carts.

Carts only ever grow by appended parcels. All store access goes through a
single lock; pricing works on a copy taken under that lock.
"""
import logging
import threading
from datetime import date
from typing import Optional

from ..engine.errors import CartNotFoundError
from ..engine.models import Cart, Parcel, Result
from ..engine.pricing_engine import PricingEngine

logger = logging.getLogger(__name__)


class CartStore:
    """Thread-safe in-memory store of carts keyed by integer id."""

    def __init__(self):
        self._carts: dict[int, Cart] = {}
        self._lock = threading.Lock()
        self._next_id = 1

    def create(self) -> int:
        """Create an empty cart and return its id."""
        with self._lock:
            cart_id = self._next_id
            self._next_id += 1
            self._carts[cart_id] = Cart()
        return cart_id

    def append(self, cart_id: int, parcels: list[Parcel]):
        """Append parcels to an existing cart."""
        with self._lock:
            cart = self._carts.get(cart_id)
            if cart is None:
                raise CartNotFoundError(cart_id)
            cart.parcels.extend(parcels)

    def get(self, cart_id: int) -> Cart:
        """Get a snapshot copy of a cart."""
        with self._lock:
            cart = self._carts.get(cart_id)
            if cart is None:
                raise CartNotFoundError(cart_id)
            return Cart(parcels=list(cart.parcels))

    def delete(self, cart_id: int) -> bool:
        with self._lock:
            if self._carts.pop(cart_id, None) is None:
                raise CartNotFoundError(cart_id)
        return True

    def count(self) -> int:
        with self._lock:
            return len(self._carts)


class CartService:
    """Service for building stored carts and pricing them."""

    def __init__(self, engine: PricingEngine, store: Optional[CartStore] = None):
        self.engine = engine
        self.store = store or CartStore()

    def create_cart(self, items) -> tuple[int, Cart]:
        """
        Create a cart from (item_id, count) pairs.

        The items are validated before the cart is stored, so an unknown
        item never leaves a half-built cart behind.
        """
        cart = self.engine.build_cart(items)
        cart_id = self.store.create()
        self.store.append(cart_id, cart.parcels)
        logger.info("Created cart %d with %d parcels", cart_id, len(cart))
        return cart_id, self.store.get(cart_id)

    def add_items(self, cart_id: int, items) -> Cart:
        """Append (item_id, count) pairs to an existing cart."""
        parcels = self.engine.build_cart(items).parcels
        self.store.append(cart_id, parcels)
        return self.store.get(cart_id)

    def get_cart(self, cart_id: int) -> Cart:
        return self.store.get(cart_id)

    def delete_cart(self, cart_id: int) -> bool:
        return self.store.delete(cart_id)

    def quote(self, cart_id: int, reference_date: Optional[date] = None) -> Result:
        """Traced price of a stored cart on `reference_date` (today by default)."""
        return self.engine.quote_cart(self.store.get(cart_id), reference_date)

    def price(self, cart_id: int, reference_date: Optional[date] = None) -> float:
        """Total price of a stored cart."""
        return self.engine.price(self.store.get(cart_id), reference_date)

    def get_stats(self) -> dict:
        return {
            'carts': self.store.count(),
            'catalog_items': len(self.engine.catalog),
            'scheduled_sales': len(self.engine.schedule),
        }
