# pricewatch/storage/stores.py

"""Store contracts the services depend on.

Implementations raise :class:`~pricewatch.models.errors.StoreError`
when the backend fails, and
:class:`~pricewatch.models.errors.MalformedPriceError` when asked to
persist a price that is not canonical.  Each method is atomic on its
own; ``*_if_absent`` semantics are enforced by the backend.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from pricewatch.models.account import Account
from pricewatch.models.product import PricePoint, TrackedProduct


class AccountStore(Protocol):
    """Identity records, one account per external identity."""

    def create_account(
        self,
        identity: str,
        display_name: str,
        created_at: datetime | None = None,
    ) -> Account | None:
        """Create an account; ``None`` if the identity already has one."""
        ...

    def find_account_by_identity(self, identity: str) -> Account | None:
        """Look up an account by its external identity."""
        ...


class ProductStore(Protocol):
    """Tracked products and their append-only price logs."""

    def create_product(
        self,
        account_id: int,
        name: str,
        url: str,
        initial_price: str,
        created_at: datetime | None = None,
    ) -> TrackedProduct | None:
        """Create a product with its first price point.

        Returns ``None`` if the account already tracks the name.
        """
        ...

    def find_product_by_name(
        self, account_id: int, name: str,
    ) -> TrackedProduct | None:
        """Find an owned product by name."""
        ...

    def delete_product(self, product_id: int) -> bool:
        """Delete a product and its price points."""
        ...

    def append_price_point(
        self,
        product_id: int,
        price: str,
        created_at: datetime | None = None,
    ) -> PricePoint:
        """Append one observation to a product's log."""
        ...

    def append_price_points(
        self,
        observations: Sequence[tuple[int, str]],
        created_at: datetime | None = None,
    ) -> list[PricePoint]:
        """Append ``(product_id, price)`` observations all-or-nothing."""
        ...

    def list_products(self, account_id: int) -> list[TrackedProduct]:
        """All products owned by an account, in creation order."""
        ...

    def list_price_points(self, product_id: int) -> list[PricePoint]:
        """A product's price log, oldest first."""
        ...

    def latest_price_point(self, product_id: int) -> PricePoint | None:
        """The most recent observation for a product."""
        ...


class TrackerStore(AccountStore, ProductStore, Protocol):
    """A single backend serving both accounts and products."""
