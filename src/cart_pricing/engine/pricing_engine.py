"""
Pricing Engine - Core cart pricing with bulk tiers and scheduled sales.

Parcel pricing runs in a fixed order:
1. N-for-one sales shrink the counted quantity
2. Bulk-override sales replace the item's own bulk tier
3. Full groups use the tier price, the remainder the unit price
4. Percent-off sales scale the subtotal

`price_parcel` and `price_cart` are pure functions. `PricingEngine` wraps
them with a loaded catalog and sale schedule and adds a traced quote.
"""
import logging
from collections.abc import Mapping
from datetime import date
from typing import Iterable, Optional

from ..config.settings import get_settings, Settings
from ..data import catalog_loader
from .errors import UnknownItemError
from .models import (
    BulkOverride, BulkPricing, Cart, Item, LineItem, NForOne, Parcel, PercentOff,
    Request, Result, SaleEffect, ScheduleEntry, describe_effect,
)
from .sale_schedule import find_active_entries, resolve_active_sales
from .validation import check_bulk_pricing, check_sale_effect

logger = logging.getLogger(__name__)


def effective_count(count: int, sale: Optional[SaleEffect] = None) -> int:
    """Quantity that pricing sees after an N-for-one sale."""
    if isinstance(sale, NForOne):
        return count // sale.n
    return count


def effective_bulk_pricing(item: Item, sale: Optional[SaleEffect] = None) -> Optional[BulkPricing]:
    """Bulk tier in force: the sale's override, else the item's own tier."""
    if isinstance(sale, BulkOverride):
        return sale.bulk_pricing
    return item.bulk_pricing


def price_parcel(parcel: Parcel, sale: Optional[SaleEffect] = None) -> float:
    """
    Calculate the price of one parcel under at most one sale effect.

    Raises:
        InvalidSaleEffectError: zero group size or N-for-one divisor
        InvalidPercentError: percent-off fraction outside [0, 1]
    """
    if sale is not None:
        check_sale_effect(sale)

    count = effective_count(parcel.count, sale)
    unit_price = parcel.item.unit_price

    tier = effective_bulk_pricing(parcel.item, sale)
    if tier is not None:
        check_bulk_pricing(tier)
        groups = count // tier.amount
        remainder = count - groups * tier.amount
        subtotal = groups * tier.group_price + remainder * unit_price
    else:
        subtotal = count * unit_price

    if isinstance(sale, PercentOff):
        subtotal *= (1 - sale.fraction)

    return float(subtotal)


def price_cart(
    cart: Cart,
    active_sales: Mapping[int, SaleEffect],
    catalog: Optional[Mapping[int, Item]] = None,
) -> float:
    """
    Calculate the total price of all parcels in the cart.

    Args:
        cart: Parcels to price (not modified)
        active_sales: Item id → sale effect, from resolve_active_sales
        catalog: When given, parcels for items missing from it raise UnknownItemError

    Returns:
        Sum of parcel prices; 0.0 for an empty cart
    """
    total = 0.0
    for parcel in cart.parcels:
        item_id = parcel.item.item_id
        if catalog is not None and item_id not in catalog:
            raise UnknownItemError(item_id)
        total += price_parcel(parcel, active_sales.get(item_id))
    return total


class PricingEngine:
    """
    Prices carts against a catalog and a schedule of dated sales.

    Without an explicit catalog the engine loads catalog.csv and sales.csv
    from the configured data directory.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        catalog: Optional[Mapping[int, Item]] = None,
        schedule: Optional[Iterable[ScheduleEntry]] = None,
    ):
        self.settings = settings or get_settings()

        if catalog is None:
            self._load_files()
        else:
            self.catalog = dict(catalog)
            self.schedule = list(schedule or [])

    def _load_files(self):
        catalog_path = self.settings.catalog_csv
        sales_path = self.settings.sales_csv

        if not catalog_path.exists():
            raise FileNotFoundError(f"catalog.csv not found at {catalog_path}.")

        catalog = catalog_loader.load_catalog(catalog_path)

        # Sales are optional: a missing file means no promotions
        if sales_path.exists():
            schedule = catalog_loader.load_schedule(sales_path, catalog)
        else:
            logger.warning("No sales file at %s, pricing without sales", sales_path)
            schedule = []

        # Swap both together so a failed reload keeps the previous data
        self.catalog, self.schedule = catalog, schedule

        logger.info(
            "Loaded %d items and %d scheduled sales from %s",
            len(self.catalog), len(self.schedule), self.settings.data_dir,
        )

    def reload_data(self):
        """Reload catalog and sales from disk."""
        self._load_files()

    def get_item(self, item_id: int) -> Item:
        try:
            return self.catalog[item_id]
        except KeyError:
            raise UnknownItemError(item_id) from None

    def build_cart(self, items) -> Cart:
        """
        Build a cart from (item_id, count) pairs or an {item_id: count} mapping.

        Raises:
            UnknownItemError: an id is not in the catalog
            ValueError: a count is negative
        """
        if isinstance(items, Mapping):
            items = items.items()

        cart = Cart()
        for item_id, count in items:
            if count < 0:
                raise ValueError(f"Count for item {item_id} must not be negative, got {count}")
            cart.add(self.get_item(item_id), count)
        return cart

    def active_sales(self, reference_date: Optional[date] = None) -> dict[int, SaleEffect]:
        """Sale effect per item id for `reference_date` (today by default)."""
        return resolve_active_sales(self.schedule, reference_date or date.today(), self.catalog)

    def price(self, cart: Cart, reference_date: Optional[date] = None) -> float:
        """Total price of `cart` on `reference_date`."""
        return price_cart(cart, self.active_sales(reference_date), self.catalog)

    def calculate(self, request: Request) -> Result:
        """
        Calculate a cart total with a step-by-step trace.

        Args:
            request: Request with (item_id, count) pairs and optional date

        Returns:
            Result whose total equals price() for the same cart and date
        """
        return self.quote_cart(self.build_cart(request.items), request.reference_date)

    def quote_cart(self, cart: Cart, reference_date: Optional[date] = None) -> Result:
        """Traced price of an already built cart, using its own item snapshots."""
        reference_date = reference_date or date.today()
        active = find_active_entries(self.schedule, reference_date, self.catalog)

        result = Result(
            reference_date=reference_date,
            total=0.0,
            lines=[],
            active_sales={
                item_id: describe_effect(entry.sale.effect) for item_id, entry in active.items()
            },
        )

        result.add_trace("Reference Date", "Pricing cart on", reference_date.isoformat())
        if active:
            for item_id, entry in active.items():
                result.add_trace(
                    "Active Sale",
                    f"{entry.sale.name or entry.sale_id} ({entry.applies_on}) on item {item_id}",
                    describe_effect(entry.sale.effect),
                )
        else:
            result.add_trace("Active Sale", "No sales active on this date")

        for parcel in cart.parcels:
            if parcel.item.item_id not in self.catalog:
                raise UnknownItemError(parcel.item.item_id)
            line = self._calculate_line(parcel, active.get(parcel.item.item_id))
            result.lines.append(line)
            result.total += line.subtotal

        result.add_trace("Total", f"{len(result.lines)} parcel(s)", f"${result.total:.2f}")
        logger.debug("Priced %d parcels on %s: %.2f", len(result.lines), reference_date, result.total)
        return result

    def _calculate_line(self, parcel: Parcel, entry: Optional[ScheduleEntry]) -> LineItem:
        """Price a single parcel and record how the number was reached."""
        item = parcel.item
        sale = entry.sale.effect if entry else None

        subtotal = price_parcel(parcel, sale)
        count = effective_count(parcel.count, sale)
        tier = effective_bulk_pricing(item, sale)

        line = LineItem(
            item_id=item.item_id,
            name=item.name,
            count=parcel.count,
            effective_count=count,
            unit_price=item.unit_price,
            subtotal=subtotal,
            bulk_pricing=tier,
            sale=describe_effect(sale) if sale is not None else None,
        )

        line.add_trace("Item Lookup", "Found item in catalog", item.name)
        if entry:
            line.add_trace("Sale", entry.sale.name or entry.sale_id, line.sale)

        if isinstance(sale, NForOne):
            line.add_trace("Effective Count", f"{parcel.count} counted in groups of {sale.n}", str(count))

        if tier is not None:
            groups = count // tier.amount
            remainder = count - groups * tier.amount
            source = "sale" if isinstance(sale, BulkOverride) else "item"
            line.add_trace(
                "Bulk Pricing",
                f"{groups} × {tier.amount} for ${tier.group_price:.2f} ({source} tier) "
                f"+ {remainder} × ${item.unit_price:.2f}",
            )
        else:
            line.add_trace("Unit Pricing", f"{count} × ${item.unit_price:.2f}")

        if isinstance(sale, PercentOff):
            line.add_trace("Discount", "Percent off applied to subtotal", line.sale)

        line.add_trace("Subtotal", f"{item.name} × {parcel.count}", f"${subtotal:.2f}")
        return line
