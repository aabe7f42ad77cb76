# pricewatch/pricing/price_codec.py

"""Canonical price strings and their order-comparable integer form.

Prices are stored as ``{whole}{sep}{fraction} {unit}``, e.g. ``423,90 €``
or ``332,55 $``.  :func:`parse_comparable` turns that into minor units
(``42390``, ``33255``) so prices can be compared and ordered without
looking at the surface string.
"""

import re

from pricewatch.config.settings import Settings
from pricewatch.models.errors import MalformedPriceError

# Amount token: whole digits, optionally one separator and two decimals
_AMOUNT_RE = re.compile(r"^(\d+)(?:[.,](\d{2}))?$")

_CANONICAL_RE = re.compile(r"^\d+[.,]\d{2} \S+$")


def parse_comparable(price: str) -> int:
    """Return the price in minor units, e.g. ``"423,90 €"`` -> ``42390``.

    Only the amount token before the unit suffix is considered; the
    unit itself is ignored.  A token without a fractional part counts
    as whole units so ordering still matches real money.

    Raises:
        MalformedPriceError: if the amount token is not numeric.
    """
    tokens = price.strip().split()
    if not tokens:
        raise MalformedPriceError(price, "empty")

    match = _AMOUNT_RE.match(tokens[0])
    if match is None:
        raise MalformedPriceError(price)

    whole, fraction = match.groups()
    return int(whole) * 100 + int(fraction or 0)


def format_price(
    minor_units: int,
    unit: str,
    separator: str | None = None,
) -> str:
    """Build a canonical price string from minor units and a unit symbol."""
    if minor_units < 0:
        raise MalformedPriceError(str(minor_units), "negative amount")
    unit = unit.strip()
    if not unit or any(ch.isspace() for ch in unit):
        raise MalformedPriceError(unit, "bad unit symbol")
    sep = separator or Settings.PRICE_SEPARATOR
    whole, fraction = divmod(minor_units, 100)
    return f"{whole}{sep}{fraction:02d} {unit}"


def is_canonical(price: str) -> bool:
    """Check the full canonical ``"{value} {unit}"`` format."""
    return bool(_CANONICAL_RE.match(price))


def prices_equal(first: str, second: str) -> bool:
    """Compare two prices by value, ignoring surface formatting."""
    return parse_comparable(first) == parse_comparable(second)
