"""
Cart totals: summing parcels, applying per-item sales, and the traced engine.
"""
from datetime import date

import pytest

from cart_pricing.engine import PricingEngine, price_cart
from cart_pricing.engine.errors import UnknownItemError
from cart_pricing.engine.models import (
    BulkOverride, BulkPricing, Cart, DayOfWeek, FixedDate, Item, NForOne, Parcel, PercentOff,
    Request, Sale, ScheduleEntry,
)

FRIDAY_OCT_1 = date(2021, 10, 1)
TUESDAY = date(2021, 10, 5)
WEDNESDAY = date(2021, 10, 6)


@pytest.fixture
def schedule():
    return [
        ScheduleEntry(
            sale=Sale(target_item_id=1, effect=BulkOverride(BulkPricing(8, 6.0)), name="Cookie Friday"),
            applies_on=DayOfWeek(4),
            sale_id="FRI-COOKIES",
        ),
        ScheduleEntry(
            sale=Sale(target_item_id=3, effect=PercentOff(0.25), name="Cheesecake day"),
            applies_on=FixedDate(10, 1),
            sale_id="OCT1-CHEESECAKE",
        ),
        ScheduleEntry(
            sale=Sale(target_item_id=4, effect=NForOne(2), name="Donut Tuesday"),
            applies_on=DayOfWeek(1),
            sale_id="TUE-DONUTS",
        ),
    ]


@pytest.fixture
def engine(catalog, schedule):
    return PricingEngine(catalog=catalog, schedule=schedule)


def test_multi_item_one(cookies, brownies, cheesecake):
    cart = Cart(parcels=[
        Parcel(item=cookies, count=1),
        Parcel(item=brownies, count=4),
        Parcel(item=cheesecake, count=1),
    ])
    assert price_cart(cart, {}) == 16.25


def test_multi_item_two(cookies, brownies, cheesecake, donuts):
    cart = Cart(parcels=[
        Parcel(item=cookies, count=1),
        Parcel(item=brownies, count=1),
        Parcel(item=cheesecake, count=1),
        Parcel(item=donuts, count=2),
    ])
    assert price_cart(cart, {}) == 12.25


def test_combined_sales(cookies, cheesecake):
    """Cookie bulk override and cheesecake percent-off in the same cart."""
    cart = Cart(parcels=[Parcel(item=cookies, count=8), Parcel(item=cheesecake, count=4)])
    active_sales = {1: BulkOverride(BulkPricing(8, 6.0)), 3: PercentOff(0.25)}
    assert price_cart(cart, active_sales) == 30.0


def test_sale_only_touches_its_item(cookies, cheesecake):
    cart = Cart(parcels=[Parcel(item=cookies, count=7), Parcel(item=cheesecake, count=1)])
    assert price_cart(cart, {3: PercentOff(0.5)}) == 7.25 + 4.0


def test_duplicate_parcels_are_priced_independently(cookies):
    """Two parcels of 4 cookies never combine into a group of 6."""
    cart = Cart(parcels=[Parcel(item=cookies, count=4), Parcel(item=cookies, count=4)])
    assert price_cart(cart, {}) == 10.0


def test_empty_cart_is_zero(cookies):
    assert price_cart(Cart(), {}) == 0.0
    assert price_cart(Cart(), {1: PercentOff(0.25), 2: NForOne(3)}) == 0.0


def test_order_does_not_matter(cookies, brownies, cheesecake):
    parcels = [Parcel(item=cookies, count=7), Parcel(item=brownies, count=5), Parcel(item=cheesecake, count=2)]
    assert price_cart(Cart(parcels=parcels), {}) == price_cart(Cart(parcels=parcels[::-1]), {})


def test_pricing_is_idempotent_and_does_not_mutate(cookies, cheesecake):
    cart = Cart(parcels=[Parcel(item=cookies, count=8), Parcel(item=cheesecake, count=4)])
    active_sales = {1: BulkOverride(BulkPricing(8, 6.0)), 3: PercentOff(0.25)}

    first = price_cart(cart, active_sales)
    second = price_cart(cart, active_sales)

    assert first == second
    assert [p.count for p in cart.parcels] == [8, 4]


def test_parcel_outside_catalog_is_an_error(catalog):
    stranger = Item(item_id=99, name="Stranger", unit_price=1.0)
    cart = Cart(parcels=[Parcel(item=stranger, count=1)])

    with pytest.raises(UnknownItemError) as exc_info:
        price_cart(cart, {}, catalog)

    assert exc_info.value.item_id == 99
    assert exc_info.value.error_code == "UNKNOWN_ITEM"


# PricingEngine

def test_engine_prices_friday_october_first(engine):
    cart = engine.build_cart([(1, 8), (3, 4)])
    assert engine.price(cart, FRIDAY_OCT_1) == 30.0


def test_engine_prices_without_sales(engine):
    cart = engine.build_cart([(1, 8), (3, 4)])
    assert engine.price(cart, WEDNESDAY) == 8.5 + 32.0


def test_engine_two_for_one_tuesday(engine):
    cart = engine.build_cart({4: 12})
    assert engine.price(cart, TUESDAY) == 3.0


def test_build_cart_unknown_item(engine):
    with pytest.raises(UnknownItemError):
        engine.build_cart([(1, 2), (42, 1)])


def test_build_cart_negative_count(engine):
    with pytest.raises(ValueError):
        engine.build_cart([(1, -1)])


def test_build_cart_keeps_duplicates(engine):
    cart = engine.build_cart([(1, 4), (1, 4)])
    assert len(cart) == 2


def test_calculate_matches_price(engine):
    request = Request(items=[(1, 8), (2, 5), (3, 4), (4, 3)], reference_date=FRIDAY_OCT_1)
    result = engine.calculate(request)

    assert result.total == engine.price(engine.build_cart(request.items), FRIDAY_OCT_1)
    assert [line.item_id for line in result.lines] == [1, 2, 3, 4]
    assert result.active_sales == {1: "8 for $6.00", 3: "25% off"}


def test_calculate_line_details(engine):
    result = engine.calculate(Request(items=[(1, 8), (4, 12)], reference_date=TUESDAY))
    cookies_line, donuts_line = result.lines

    assert cookies_line.sale is None
    assert cookies_line.bulk_pricing == BulkPricing(6, 6.0)
    assert cookies_line.subtotal == 8.5

    assert donuts_line.sale == "2 for 1"
    assert donuts_line.effective_count == 6
    assert donuts_line.subtotal == 3.0
    assert "Effective Count" in donuts_line.get_trace_text()


def test_calculate_trace(engine):
    result = engine.calculate(Request(items=[(1, 8)], reference_date=FRIDAY_OCT_1))
    text = result.get_trace_text()

    assert "2021-10-01" in text
    assert "Cookie Friday" in text
    assert "$6.00" in text
    assert "sale tier" in result.lines[0].get_trace_text()


def test_calculate_empty_request(engine):
    result = engine.calculate(Request(items=[], reference_date=WEDNESDAY))
    assert result.total == 0.0
    assert result.lines == []
    assert result.active_sales == {}


def test_engine_schedule_for_unknown_item_is_an_error(catalog):
    schedule = [ScheduleEntry(sale=Sale(target_item_id=77, effect=PercentOff(0.1)), applies_on=DayOfWeek(0))]
    engine = PricingEngine(catalog=catalog, schedule=schedule)

    with pytest.raises(UnknownItemError):
        engine.active_sales(WEDNESDAY)


def test_result_to_dict(engine):
    payload = engine.calculate(Request(items=[(3, 4)], reference_date=FRIDAY_OCT_1)).to_dict()

    assert payload["price"] == 24.0
    assert payload["reference_date"] == "2021-10-01"
    assert payload["active_sales"]["3"] == "25% off"
    assert payload["lines"][0]["sale"] == "25% off"


def test_quote_cart_prices_item_snapshots(engine):
    """A built cart keeps the prices its items had when they were added."""
    cart = Cart()
    cart.add(Item(item_id=3, name="Key Lime Cheesecake", unit_price=10.0), 2)

    result = engine.quote_cart(cart, WEDNESDAY)

    assert result.total == 20.0
    assert result.total == engine.price(cart, WEDNESDAY)


def test_quote_cart_rejects_items_missing_from_catalog(engine):
    cart = Cart()
    cart.add(Item(item_id=77, name="Scone", unit_price=3.0), 1)

    with pytest.raises(UnknownItemError):
        engine.quote_cart(cart, WEDNESDAY)
