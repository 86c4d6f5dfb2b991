"""
Data models for the pricing engine.

Catalog goods, carts and sales are frozen dataclasses; sale effects and
schedule predicates are small closed sets of types checked with isinstance.
"""
import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Union


@dataclass(frozen=True)
class BulkPricing:
    """Price charged for every full group of `amount` units."""
    amount: int
    group_price: float


@dataclass(frozen=True)
class Item:
    """A good with a price."""
    item_id: int
    name: str
    # TODO: move money to integer cents once the data files carry them.
    unit_price: float
    bulk_pricing: Optional[BulkPricing] = None


@dataclass(frozen=True)
class Parcel:
    """A number of one item grouped together (ex. "8 cookies")."""
    item: Item
    count: int


@dataclass
class Cart:
    """A collection of parcels that is priced together."""
    parcels: list[Parcel] = field(default_factory=list)

    def add(self, item: Item, count: int) -> Parcel:
        """Append a parcel for `item` and return it."""
        parcel = Parcel(item=item, count=count)
        self.parcels.append(parcel)
        return parcel

    def __len__(self) -> int:
        return len(self.parcels)


# Sale effects

@dataclass(frozen=True)
class BulkOverride:
    """Replaces the item's own bulk tier while the sale is active."""
    bulk_pricing: BulkPricing


@dataclass(frozen=True)
class PercentOff:
    """Takes `fraction` (0..1) off the parcel subtotal."""
    fraction: float


@dataclass(frozen=True)
class NForOne:
    """Every `n` units count as one for pricing."""
    n: int


SaleEffect = Union[BulkOverride, PercentOff, NForOne]


def describe_effect(effect: SaleEffect) -> str:
    """Short human-readable label for a sale effect."""
    if isinstance(effect, BulkOverride):
        tier = effect.bulk_pricing
        return f"{tier.amount} for ${tier.group_price:.2f}"
    elif isinstance(effect, PercentOff):
        return f"{effect.fraction * 100:g}% off"
    elif isinstance(effect, NForOne):
        return f"{effect.n} for 1"
    return repr(effect)


# Schedule predicates

@dataclass(frozen=True)
class DayOfWeek:
    """Active on one weekday every week (Monday = 0, as date.weekday())."""
    weekday: int

    def applies_to(self, reference_date: date) -> bool:
        return reference_date.weekday() == self.weekday

    def __str__(self) -> str:
        return f"every {calendar.day_name[self.weekday]}"


@dataclass(frozen=True)
class FixedDate:
    """Active on the same month and day every year."""
    month: int
    day: int

    def applies_to(self, reference_date: date) -> bool:
        return reference_date.month == self.month and reference_date.day == self.day

    def __str__(self) -> str:
        return f"every {calendar.month_name[self.month]} {self.day}"


SalePredicate = Union[DayOfWeek, FixedDate]


@dataclass(frozen=True)
class Sale:
    """A promotional effect on one catalog item."""
    target_item_id: int
    effect: SaleEffect
    name: str = ""


@dataclass(frozen=True)
class ScheduleEntry:
    """A sale paired with the calendar condition that activates it."""
    sale: Sale
    applies_on: SalePredicate
    sale_id: str = ""

    def is_active(self, reference_date: date) -> bool:
        return self.applies_on.applies_to(reference_date)

    @property
    def target_item_id(self) -> int:
        return self.sale.target_item_id


# Traced quotes

@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class LineItem:
    """The priced result for one parcel."""
    item_id: int
    name: str
    count: int
    effective_count: int
    unit_price: float
    subtotal: float
    bulk_pricing: Optional[BulkPricing] = None
    sale: Optional[str] = None
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this line item."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)


@dataclass
class Request:
    """A pricing request: (item_id, count) pairs priced on a given day."""
    items: list[tuple[int, int]]
    reference_date: Optional[date] = None


@dataclass
class Result:
    """Complete result of a traced cart calculation."""
    reference_date: date
    total: float
    lines: list[LineItem]
    active_sales: dict[int, str] = field(default_factory=dict)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the result-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable result trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Plain dict for JSON responses."""
        return {
            "price": self.total,
            "reference_date": self.reference_date.isoformat(),
            "active_sales": {str(k): v for k, v in self.active_sales.items()},
            "lines": [
                {
                    "item_id": line.item_id,
                    "name": line.name,
                    "count": line.count,
                    "effective_count": line.effective_count,
                    "unit_price": line.unit_price,
                    "subtotal": line.subtotal,
                    "sale": line.sale,
                }
                for line in self.lines
            ],
        }
