import logging
from datetime import date
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from cart_pricing import __version__
from cart_pricing.config.settings import get_settings
from cart_pricing.engine.errors import PricingError
from cart_pricing.engine.models import describe_effect
from cart_pricing.engine.sale_schedule import find_active_entries
from cart_pricing.api.cart_api import router as cart_router
from cart_pricing.api.state import engine, cart_service

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Cart Pricing API",
    description="Prices shopping carts with bulk tiers and scheduled sales",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include cart API
app.include_router(cart_router)


@app.get("/")
async def root():
    return {"status": "online", "message": "Cart Pricing API Active"}


@app.get("/catalog")
async def get_catalog(search: Optional[str] = None):
    items = engine.catalog.values()
    if search:
        items = [item for item in items if search.lower() in item.name.lower()]

    return [
        {
            "item_id": item.item_id,
            "name": item.name,
            "unit_price": item.unit_price,
            "bulk_pricing": (
                {"amount": item.bulk_pricing.amount, "group_price": item.bulk_pricing.group_price}
                if item.bulk_pricing else None
            ),
        }
        for item in items
    ]


@app.get("/sales/active")
async def get_active_sales(reference_date: Optional[date] = Query(None, alias="date")):
    reference_date = reference_date or date.today()
    try:
        active = find_active_entries(engine.schedule, reference_date, engine.catalog)
    except PricingError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "reference_date": reference_date.isoformat(),
        "sales": [
            {
                "sale_id": entry.sale_id,
                "name": entry.sale.name,
                "item_id": item_id,
                "effect": describe_effect(entry.sale.effect),
                "applies_on": str(entry.applies_on),
            }
            for item_id, entry in active.items()
        ],
    }


@app.get("/system/status")
async def get_status():
    stats = cart_service.get_stats()
    return {
        "engine_active": True,
        "data_dir": str(settings.data_dir),
        **stats,
    }
