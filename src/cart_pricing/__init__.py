"""
Cart Pricing Package

Prices shopping carts of catalog goods with bulk tiers and date-scheduled
sales (day-of-week or fixed month/day promotions).
"""

__version__ = "1.0.0"
