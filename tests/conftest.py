import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from cart_pricing.engine.models import BulkPricing, Item
from cart_pricing.config.settings import reset_settings


@pytest.fixture
def cookies():
    return Item(item_id=1, name="Cookies", unit_price=1.25, bulk_pricing=BulkPricing(amount=6, group_price=6.0))


@pytest.fixture
def brownies():
    return Item(item_id=2, name="Brownies", unit_price=2.0, bulk_pricing=BulkPricing(amount=4, group_price=7.0))


@pytest.fixture
def cheesecake():
    return Item(item_id=3, name="Cheesecake", unit_price=8.0)


@pytest.fixture
def donuts():
    return Item(item_id=4, name="Donuts", unit_price=0.5)


@pytest.fixture
def catalog(cookies, brownies, cheesecake, donuts):
    return {item.item_id: item for item in (cookies, brownies, cheesecake, donuts)}


@pytest.fixture
def fresh_settings():
    """Drop cached settings before and after a test that changes the environment."""
    reset_settings()
    yield
    reset_settings()
