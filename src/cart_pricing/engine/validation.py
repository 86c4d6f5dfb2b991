"""Checks shared by the loader and the pricer before any division happens."""
from .errors import InvalidPercentError, InvalidSaleEffectError
from .models import BulkOverride, BulkPricing, NForOne, PercentOff


def check_bulk_pricing(bulk_pricing: BulkPricing):
    if bulk_pricing.amount < 1:
        raise InvalidSaleEffectError(
            f"Bulk pricing group size must be at least 1, got {bulk_pricing.amount}"
        )


def check_sale_effect(effect):
    """Raise if `effect` is not a usable sale effect."""
    if isinstance(effect, BulkOverride):
        check_bulk_pricing(effect.bulk_pricing)
    elif isinstance(effect, PercentOff):
        if not 0 <= effect.fraction <= 1:
            raise InvalidPercentError(effect.fraction)
    elif isinstance(effect, NForOne):
        if effect.n < 1:
            raise InvalidSaleEffectError(f"N-for-one divisor must be at least 1, got {effect.n}")
    else:
        raise InvalidSaleEffectError(f"Unsupported sale effect {effect!r}")
