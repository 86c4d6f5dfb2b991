"""
Catalog Loader - Reads and validates the item catalog and the sale schedule.

catalog.csv columns: item_id, name, unit_price, bulk_amount, bulk_price
sales.csv columns:   sale_id, item_id, name, effect, value, bulk_amount, applies_on, when

Every row is validated; all problems are reported together with their
line numbers. Sale rows keep file order, which decides ties between two
sales active for the same item on the same day.
"""
import calendar
import hashlib
import logging
import math
from datetime import date, datetime
from pathlib import Path
from typing import Mapping, Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from ..engine.errors import CatalogLoadError, PricingError
from ..engine.models import (
    BulkOverride, BulkPricing, DayOfWeek, FixedDate, Item, NForOne, PercentOff,
    Sale, ScheduleEntry,
)
from ..engine.validation import check_sale_effect

logger = logging.getLogger(__name__)


CATALOG_COLUMNS = ['item_id', 'name', 'unit_price', 'bulk_amount', 'bulk_price']
SALES_COLUMNS = ['sale_id', 'item_id', 'name', 'effect', 'value', 'bulk_amount', 'applies_on', 'when']

VALID_EFFECTS = {'bulk_override', 'percent_off', 'n_for_one'}
VALID_SCHEDULES = {'day_of_week', 'fixed_date'}

WEEKDAYS = {name.lower(): i for i, name in enumerate(calendar.day_name)}
WEEKDAYS.update({abbr.lower(): i for i, abbr in enumerate(calendar.day_abbr)})


def get_file_hash(path: Path) -> str:
    """Get SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def _read_csv(path: Path, required_columns: list[str]) -> pd.DataFrame:
    """Read a CSV as stripped strings (blank cells become '')."""
    try:
        df = pd.read_csv(path, dtype=str).fillna('')
    except pd.errors.EmptyDataError:
        raise CatalogLoadError([f"{path.name}: file is empty"]) from None
    except pd.errors.ParserError as e:
        raise CatalogLoadError([f"{path.name}: {e}"]) from None

    df.columns = [c.strip() for c in df.columns]
    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise CatalogLoadError([f"{path.name}: missing columns {', '.join(missing)}"])

    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def parse_weekday(value: str) -> DayOfWeek:
    """Parse 'friday' / 'Fri' into a DayOfWeek predicate."""
    try:
        return DayOfWeek(weekday=WEEKDAYS[value.lower()])
    except KeyError:
        raise ValueError(f"unknown weekday '{value}'") from None


def parse_fixed_date(value: str) -> FixedDate:
    """Parse 'MM-DD' into a FixedDate predicate."""
    parts = value.split('-')
    if len(parts) != 2:
        raise ValueError(f"fixed date '{value}' must be MM-DD")
    month, day = int(parts[0]), int(parts[1])
    # Leap year so that 02-29 is accepted
    date(2000, month, day)
    return FixedDate(month=month, day=day)


def validate_item(row: Mapping, line_num: int) -> tuple[Optional[Item], list[str]]:
    """
    Validate and parse an item from a catalog row.

    Returns (item, errors) - item is None if validation failed.
    """
    errors = []

    try:
        item_id = int(row['item_id'])
    except ValueError:
        return None, [f"Line {line_num}: item_id must be an integer"]

    name = row['name'] or f"Item {item_id}"

    try:
        unit_price = float(row['unit_price'])
    except ValueError:
        return None, [f"Line {line_num}: unit_price must be numeric"]
    if not math.isfinite(unit_price):
        errors.append(f"Line {line_num}: unit_price must be a finite number")
    elif unit_price < 0:
        errors.append(f"Line {line_num}: unit_price must not be negative")

    bulk_pricing = None
    if row['bulk_amount'] or row['bulk_price']:
        if not (row['bulk_amount'] and row['bulk_price']):
            errors.append(f"Line {line_num}: bulk_amount and bulk_price must be given together")
        else:
            try:
                bulk_pricing = BulkPricing(amount=int(row['bulk_amount']), group_price=float(row['bulk_price']))
            except ValueError:
                errors.append(f"Line {line_num}: bulk_amount must be an integer and bulk_price numeric")
            else:
                if bulk_pricing.amount < 1:
                    errors.append(f"Line {line_num}: bulk_amount must be at least 1")
                if not math.isfinite(bulk_pricing.group_price):
                    errors.append(f"Line {line_num}: bulk_price must be a finite number")
                elif bulk_pricing.group_price < 0:
                    errors.append(f"Line {line_num}: bulk_price must not be negative")

    if errors:
        return None, errors

    return Item(item_id=item_id, name=name, unit_price=unit_price, bulk_pricing=bulk_pricing), []


def _parse_effect(row: Mapping):
    effect_type = row['effect']
    value = row['value']

    if effect_type == 'bulk_override':
        group_price = float(value)
        if not math.isfinite(group_price) or group_price < 0:
            raise ValueError(f"bulk_override price '{value}' must be a finite, non-negative number")
        return BulkOverride(BulkPricing(amount=int(row['bulk_amount']), group_price=group_price))
    elif effect_type == 'percent_off':
        return PercentOff(fraction=float(value))
    elif effect_type == 'n_for_one':
        return NForOne(n=int(value))
    raise ValueError(f"invalid effect '{effect_type}', must be one of: {sorted(VALID_EFFECTS)}")


def validate_sale(
    row: Mapping,
    line_num: int,
    catalog: Mapping[int, Item],
) -> tuple[Optional[ScheduleEntry], list[str]]:
    """
    Validate and parse a schedule entry from a sales row.

    Returns (entry, errors) - entry is None if validation failed.
    """
    errors = []

    sale_id = row['sale_id'] or f"line-{line_num}"

    try:
        item_id = int(row['item_id'])
    except ValueError:
        return None, [f"Line {line_num}: item_id must be an integer"]
    if item_id not in catalog:
        errors.append(f"Line {line_num}: sale {sale_id} targets unknown item {item_id}")

    effect = None
    try:
        effect = _parse_effect(row)
        check_sale_effect(effect)
    except ValueError as e:
        errors.append(f"Line {line_num}: {e}")
    except PricingError as e:
        errors.append(f"Line {line_num}: {e.explanation}")

    applies_on = None
    schedule_type = row['applies_on']
    try:
        if schedule_type == 'day_of_week':
            applies_on = parse_weekday(row['when'])
        elif schedule_type == 'fixed_date':
            applies_on = parse_fixed_date(row['when'])
        else:
            errors.append(
                f"Line {line_num}: invalid applies_on '{schedule_type}', "
                f"must be one of: {sorted(VALID_SCHEDULES)}"
            )
    except ValueError as e:
        errors.append(f"Line {line_num}: {e}")

    if errors:
        return None, errors

    sale = Sale(target_item_id=item_id, effect=effect, name=row['name'] or sale_id)
    return ScheduleEntry(sale=sale, applies_on=applies_on, sale_id=sale_id), []


def load_catalog(path: Path) -> dict[int, Item]:
    """
    Load the item catalog.

    Raises:
        CatalogLoadError: any row is invalid or an item id repeats
    """
    df = _read_csv(path, CATALOG_COLUMNS)

    catalog: dict[int, Item] = {}
    all_errors = []

    for line_num, row in enumerate(df.to_dict(orient='records'), start=2):  # +2 for 1-indexed header row
        item, errors = validate_item(row, line_num)
        if errors:
            all_errors.extend(errors)
        elif item.item_id in catalog:
            all_errors.append(f"Line {line_num}: duplicate item_id {item.item_id}")
        else:
            catalog[item.item_id] = item

    if all_errors:
        raise CatalogLoadError(all_errors)

    logger.debug("Loaded %d catalog items from %s", len(catalog), path)
    return catalog


def load_schedule(path: Path, catalog: Mapping[int, Item]) -> list[ScheduleEntry]:
    """
    Load scheduled sales in file order.

    Raises:
        CatalogLoadError: any row is invalid or targets an unknown item
    """
    df = _read_csv(path, SALES_COLUMNS)

    schedule = []
    all_errors = []

    for line_num, row in enumerate(df.to_dict(orient='records'), start=2):
        entry, errors = validate_sale(row, line_num, catalog)
        if errors:
            all_errors.extend(errors)
        else:
            schedule.append(entry)

    if all_errors:
        raise CatalogLoadError(all_errors)

    logger.debug("Loaded %d scheduled sales from %s", len(schedule), path)
    return schedule


def check_data_files(settings: Optional[Settings] = None, verbose: bool = True) -> dict:
    """
    Validate catalog.csv and sales.csv and summarize them.

    Args:
        settings: Optional settings override
        verbose: Print progress messages

    Returns:
        Report dictionary with status, input file hashes, metrics and errors
    """
    settings = settings or get_settings()

    report = {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "input_files": {},
        "metrics": {},
        "errors": [],
    }

    for key, path in (("catalog", settings.catalog_csv), ("sales", settings.sales_csv)):
        report["input_files"][key] = {
            "path": str(path),
            "exists": path.exists(),
            "hash": get_file_hash(path),
        }

    if not settings.catalog_csv.exists():
        report["errors"].append(f"catalog.csv not found at {settings.catalog_csv}")
        report["status"] = "failed"
        return report

    try:
        catalog = load_catalog(settings.catalog_csv)
        schedule = load_schedule(settings.sales_csv, catalog) if settings.sales_csv.exists() else []
    except CatalogLoadError as e:
        report["errors"].extend(e.errors)
        report["status"] = "failed"
        return report

    by_effect = {}
    for entry in schedule:
        kind = type(entry.sale.effect).__name__
        by_effect[kind] = by_effect.get(kind, 0) + 1

    report["metrics"] = {
        "item_count": len(catalog),
        "items_with_bulk_pricing": sum(1 for item in catalog.values() if item.bulk_pricing),
        "sale_count": len(schedule),
        "sales_by_effect": by_effect,
    }
    report["status"] = "success"

    if verbose:
        print(f"✅ {len(catalog)} items, {len(schedule)} scheduled sales")

    return report
