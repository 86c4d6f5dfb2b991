"""
Cart API - FastAPI router for creating and pricing carts.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from ..engine.errors import (
    CartNotFoundError, InvalidPercentError, InvalidSaleEffectError, PricingError, UnknownItemError,
)
from ..engine.models import Cart
from .state import cart_service

router = APIRouter(prefix="/cart", tags=["cart"])


# Pydantic models for API
class ParcelIn(BaseModel):
    """One item/quantity pair to put in a cart."""
    item_id: int
    count: int = Field(ge=0)


class CartCreate(BaseModel):
    """Request model for creating a cart."""
    items: list[ParcelIn] = []


class ParcelOut(BaseModel):
    item_id: int
    name: str
    count: int


class CartResponse(BaseModel):
    """Response model for a stored cart."""
    cart_id: int
    parcels: list[ParcelOut]


class LineOut(BaseModel):
    item_id: int
    name: str
    count: int
    effective_count: int
    unit_price: float
    subtotal: float
    sale: Optional[str]


class PriceResponse(BaseModel):
    """Response model for a priced cart."""
    cart_id: int
    price: float
    reference_date: date
    active_sales: dict[str, str]
    lines: list[LineOut]


def _http_error(e: PricingError) -> HTTPException:
    """Translate an engine error into an HTTP error."""
    if isinstance(e, CartNotFoundError):
        return HTTPException(status_code=404, detail=e.explanation)
    if isinstance(e, UnknownItemError):
        return HTTPException(status_code=400, detail=e.explanation)
    if isinstance(e, (InvalidSaleEffectError, InvalidPercentError)):
        return HTTPException(status_code=500, detail=f"Sale configuration error: {e.explanation}")
    return HTTPException(status_code=500, detail=str(e))


def _cart_response(cart_id: int, cart: Cart) -> CartResponse:
    return CartResponse(
        cart_id=cart_id,
        parcels=[
            ParcelOut(item_id=p.item.item_id, name=p.item.name, count=p.count)
            for p in cart.parcels
        ],
    )


# Endpoints

@router.post("", response_model=CartResponse, status_code=201)
async def create_cart(cart_data: CartCreate):
    """Create a cart from item/quantity pairs."""
    try:
        cart_id, cart = cart_service.create_cart([(p.item_id, p.count) for p in cart_data.items])
    except PricingError as e:
        raise _http_error(e)
    return _cart_response(cart_id, cart)


@router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: int):
    """Get the parcels of a cart."""
    try:
        return _cart_response(cart_id, cart_service.get_cart(cart_id))
    except PricingError as e:
        raise _http_error(e)


@router.post("/{cart_id}/items", response_model=CartResponse)
async def add_items(cart_id: int, cart_data: CartCreate):
    """Append item/quantity pairs to a cart."""
    try:
        cart = cart_service.add_items(cart_id, [(p.item_id, p.count) for p in cart_data.items])
    except PricingError as e:
        raise _http_error(e)
    return _cart_response(cart_id, cart)


@router.get("/{cart_id}/price", response_model=PriceResponse)
async def get_cart_price(cart_id: int, reference_date: Optional[date] = Query(None, alias="date")):
    """Price a cart on `date` (today when omitted)."""
    try:
        result = cart_service.quote(cart_id, reference_date)
    except PricingError as e:
        raise _http_error(e)

    payload = result.to_dict()
    return PriceResponse(cart_id=cart_id, **payload)


@router.delete("/{cart_id}")
async def delete_cart(cart_id: int):
    """Delete a cart."""
    try:
        cart_service.delete_cart(cart_id)
    except PricingError as e:
        raise _http_error(e)
    return {"success": True, "message": f"Cart {cart_id} deleted"}
