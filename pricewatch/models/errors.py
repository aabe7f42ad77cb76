# pricewatch/models/errors.py

"""Exception hierarchy shared by the codec, compressor and stores.

None of these cross a service boundary: services translate them into
result variants (see :mod:`pricewatch.models.results`).
"""


class PriceWatchError(Exception):
    """Base class for all pricewatch errors."""


class MalformedPriceError(PriceWatchError, ValueError):
    """A price string is not in the canonical ``"{value} {unit}"`` form."""

    def __init__(self, price: str, reason: str = "not numeric") -> None:
        self.price = price
        self.reason = reason
        super().__init__(f"Malformed price {price!r}: {reason}")


class EmptyHistoryError(PriceWatchError):
    """A product has no price points to build a history from."""


class StoreError(PriceWatchError):
    """The persistence backend failed to complete an operation."""
