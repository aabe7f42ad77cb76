# pricewatch/models/results.py

"""Discriminated outcomes returned by every service operation.

Each variant is a frozen dataclass carrying a literal ``status`` tag.
Operations return a union of the variants they can produce, and
adapters match on them exhaustively, ending with
``typing.assert_never`` so a type checker flags unhandled variants.
"""

from dataclasses import dataclass, field
from typing import Literal

from pricewatch.models.account import Account
from pricewatch.models.product import (
    PriceChange,
    PricePoint,
    ProductSummary,
    TrackedProduct,
)
from pricewatch.pricing.history_compressor import HistoryRow

# ── Success variants ─────────────────────────────────────


@dataclass(frozen=True)
class RegisterSuccess:
    """A new account was created."""

    account: Account
    status: Literal["success"] = field(default="success", init=False)


@dataclass(frozen=True)
class AddSuccess:
    """A product is now tracked, with its first observed price."""

    product: TrackedProduct
    price: str
    status: Literal["success"] = field(default="success", init=False)


@dataclass(frozen=True)
class RemoveSuccess:
    """The product and its price history were deleted."""

    status: Literal["success"] = field(default="success", init=False)


@dataclass(frozen=True)
class UpdateSuccess:
    """A batch update ran over every owned product."""

    attempted: int
    changed: list[PriceChange]
    status: Literal["success"] = field(default="success", init=False)


@dataclass(frozen=True)
class ListSuccess:
    """Latest price of every owned product."""

    products: list[ProductSummary]
    status: Literal["success"] = field(default="success", init=False)


@dataclass(frozen=True)
class HistorySuccess:
    """A product, its raw observation log and its compressed timeline."""

    product: TrackedProduct
    price_points: list[PricePoint]
    timeline: list[HistoryRow]
    status: Literal["success"] = field(default="success", init=False)


# ── Failure variants ─────────────────────────────────────


@dataclass(frozen=True)
class DuplicateAccount:
    """The identity already has an account."""

    status: Literal["duplicate"] = field(default="duplicate", init=False)


@dataclass(frozen=True)
class NotRegistered:
    """The identity has no account."""

    status: Literal["not_registered"] = field(
        default="not_registered", init=False
    )


@dataclass(frozen=True)
class NameMissing:
    """No product name was given."""

    status: Literal["name_missing"] = field(
        default="name_missing", init=False
    )


@dataclass(frozen=True)
class UrlMissing:
    """No product URL was given."""

    status: Literal["url_missing"] = field(default="url_missing", init=False)


@dataclass(frozen=True)
class ProductExists:
    """The account already tracks a product with this name."""

    status: Literal["product_exists"] = field(
        default="product_exists", init=False
    )


@dataclass(frozen=True)
class ScrapeFailed:
    """No price could be extracted from the URL."""

    url: str
    status: Literal["unable_to_scrape"] = field(
        default="unable_to_scrape", init=False
    )


@dataclass(frozen=True)
class ProductNotFound:
    """The account tracks no product with this name."""

    status: Literal["product_not_found"] = field(
        default="product_not_found", init=False
    )


@dataclass(frozen=True)
class NameNotFound:
    """History was requested for a name the account does not track."""

    name: str
    status: Literal["name_wrong"] = field(default="name_wrong", init=False)


@dataclass(frozen=True)
class StoreFailure:
    """The store (or stored data) failed; carries the error for display."""

    error: str
    status: Literal["error"] = field(default="error", init=False)


# ── Per-operation unions ─────────────────────────────────

RegisterResult = RegisterSuccess | DuplicateAccount | StoreFailure

AddResult = (
    AddSuccess
    | NotRegistered
    | NameMissing
    | UrlMissing
    | ProductExists
    | ScrapeFailed
    | StoreFailure
)

RemoveResult = (
    RemoveSuccess | NotRegistered | NameMissing | ProductNotFound | StoreFailure
)

UpdateResult = UpdateSuccess | NotRegistered | StoreFailure

ListResult = ListSuccess | NotRegistered | StoreFailure

HistoryResult = (
    HistorySuccess | NotRegistered | NameMissing | NameNotFound | StoreFailure
)
