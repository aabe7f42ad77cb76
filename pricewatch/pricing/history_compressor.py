# pricewatch/pricing/history_compressor.py

"""Collapse a price observation log into a changed-only timeline."""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from pricewatch.models.errors import EmptyHistoryError
from pricewatch.models.product import PricePoint
from pricewatch.pricing.price_codec import parse_comparable


@dataclass(frozen=True)
class HeaderRow:
    """Identifies the product and how many points were observed."""

    name: str
    count: int
    kind: Literal["header"] = "header"


@dataclass(frozen=True)
class CurrentPriceRow:
    """The latest observed price, always emitted."""

    price: str
    kind: Literal["current"] = "current"


@dataclass(frozen=True)
class SeparatorRow:
    """Marks a gap of collapsed, unchanged observations."""

    kind: Literal["separator"] = "separator"


@dataclass(frozen=True)
class ChangeRow:
    """A point where the price differs from its neighbour."""

    created_at: datetime
    price: str
    kind: Literal["change"] = "change"


HistoryRow = HeaderRow | CurrentPriceRow | SeparatorRow | ChangeRow


def compress_history(
    name: str,
    price_points: Sequence[PricePoint],
) -> Iterator[HistoryRow]:
    """Return a lazy changed-only timeline for *price_points*.

    *price_points* is the stored log, oldest first.  The timeline is
    read newest first: the header, then the current price, then a
    separator and a row for every point whose comparable value differs
    from the point before it.  Runs of equal prices collapse to one row.

    The "current" row is therefore the newest point, not the oldest:
    a log of ``[100, 200]`` yields current ``200`` followed by a change
    row for ``100``.  The stored log itself is never reordered.

    Raises:
        EmptyHistoryError: if *price_points* is empty.  Raised here,
            before iteration starts.
    """
    if not price_points:
        raise EmptyHistoryError(f"No price history for {name!r}")
    return _timeline_rows(name, price_points)


def _timeline_rows(
    name: str,
    price_points: Sequence[PricePoint],
) -> Iterator[HistoryRow]:
    """Yield timeline rows; the sequence is known to be non-empty."""
    yield HeaderRow(name=name, count=len(price_points))

    newest_first = reversed(price_points)
    current = next(newest_first)
    yield CurrentPriceRow(price=current.price)

    previous = parse_comparable(current.price)
    for point in newest_first:
        value = parse_comparable(point.price)
        if value != previous:
            yield SeparatorRow()
            yield ChangeRow(created_at=point.created_at, price=point.price)
        previous = value
