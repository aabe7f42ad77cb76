# pricewatch/models/product.py

"""Tracked product models for inter-module data flow."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PricePoint:
    """A single immutable price observation, in canonical string form."""

    price: str
    created_at: datetime


@dataclass(frozen=True)
class TrackedProduct:
    """A product tracked by exactly one account."""

    id: int
    account_id: int
    name: str
    url: str
    created_at: datetime


@dataclass(frozen=True)
class ProductSummary:
    """Flattened listing row: a product and its latest price."""

    name: str
    price: str
    url: str


@dataclass(frozen=True)
class PriceChange:
    """A product whose latest observed price differs from the stored one."""

    product: str
    old_price: str
    new_price: str


def name_key(name: str) -> str:
    """Return the lookup key for a product name (case-insensitive)."""
    return name.strip().casefold()
