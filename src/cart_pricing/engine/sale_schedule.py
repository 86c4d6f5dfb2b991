"""
Sale Schedule - Resolves which sale applies to each item on a given date.

Used by the pricing engine to pick at most one sale effect per item
before parcels are priced.
"""
import logging
from datetime import date
from typing import Iterable, Mapping, Optional

from .errors import UnknownItemError
from .models import Item, SaleEffect, ScheduleEntry

logger = logging.getLogger(__name__)


def find_active_entries(
    entries: Iterable[ScheduleEntry],
    reference_date: date,
    catalog: Optional[Mapping[int, Item]] = None,
) -> dict[int, ScheduleEntry]:
    """
    Find the schedule entry in effect for each item on `reference_date`.

    When two entries for the same item are active together, the later one
    in iteration order wins.
    """
    active: dict[int, ScheduleEntry] = {}

    for entry in entries:
        item_id = entry.target_item_id
        if catalog is not None and item_id not in catalog:
            raise UnknownItemError(item_id)

        if not entry.is_active(reference_date):
            continue

        previous = active.get(item_id)
        if previous is not None:
            logger.debug(
                "Sale %s overrides %s for item %s on %s",
                entry.sale_id or entry.sale.name, previous.sale_id or previous.sale.name,
                item_id, reference_date.isoformat(),
            )
        active[item_id] = entry

    return active


def resolve_active_sales(
    entries: Iterable[ScheduleEntry],
    reference_date: date,
    catalog: Optional[Mapping[int, Item]] = None,
) -> dict[int, SaleEffect]:
    """
    Map item id → active sale effect for `reference_date`.

    Args:
        entries: Schedule entries in tie-break order
        reference_date: Day the cart is priced on
        catalog: When given, entries for unknown items raise UnknownItemError

    Returns:
        At most one effect per item id (last active entry wins)
    """
    active = find_active_entries(entries, reference_date, catalog)
    return {item_id: entry.sale.effect for item_id, entry in active.items()}
