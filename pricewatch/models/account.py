# pricewatch/models/account.py

"""Registered user account model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Account:
    """A user identity that owns tracked products.

    ``identity`` is the external platform user id and the natural key;
    ``id`` is the store's surrogate key.
    """

    id: int
    identity: str
    display_name: str
    created_at: datetime
