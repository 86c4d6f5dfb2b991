"""Pricing error taxonomy. Every failure carries a stable code and an explanation."""


class PricingError(Exception):
    """Base class for all pricing exceptions."""

    def __init__(self, error_code: str, explanation: str):
        self.error_code = error_code
        self.explanation = explanation
        super().__init__(f"[{self.error_code}] {self.explanation}")


class UnknownItemError(PricingError):
    """A parcel or sale references an item id absent from the catalog."""

    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__("UNKNOWN_ITEM", f"Item {item_id!r} is not in the catalog")


class InvalidSaleEffectError(PricingError):
    def __init__(self, explanation: str):
        super().__init__("INVALID_SALE_EFFECT", explanation)


class InvalidPercentError(PricingError):
    def __init__(self, fraction):
        self.fraction = fraction
        super().__init__(
            "INVALID_PERCENT",
            f"Percent-off fraction {fraction!r} is outside [0, 1]",
        )


class CatalogLoadError(PricingError):
    """Raised once per load with every line-level problem found."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("CATALOG_LOAD", "; ".join(errors))


class CartNotFoundError(PricingError):
    def __init__(self, cart_id):
        self.cart_id = cart_id
        super().__init__("CART_NOT_FOUND", f"Cart {cart_id!r} does not exist")
