# tests/test_price_codec.py

"""Tests for canonical price parsing and formatting."""

import unittest

from pricewatch.models.errors import MalformedPriceError
from pricewatch.pricing.price_codec import (
    format_price,
    is_canonical,
    parse_comparable,
    prices_equal,
)


class TestParseComparable(unittest.TestCase):
    """parse_comparable returns minor units with money ordering."""

    def test_euro_example(self) -> None:
        """'423,90 €' parses to 42390."""
        self.assertEqual(parse_comparable("423,90 €"), 42390)

    def test_dollar_example(self) -> None:
        """'332,55 $' parses to 33255."""
        self.assertEqual(parse_comparable("332,55 $"), 33255)

    def test_surrounding_whitespace_ignored(self) -> None:
        """Leading/trailing whitespace is stripped."""
        self.assertEqual(parse_comparable("  9,99 €\n"), 999)

    def test_dot_separator_accepted(self) -> None:
        """A dot separator parses the same as a comma."""
        self.assertEqual(parse_comparable("423.90 €"), 42390)

    def test_whole_units_scaled(self) -> None:
        """A token without a fraction counts as whole units."""
        self.assertEqual(parse_comparable("12 €"), 1200)

    def test_unit_is_ignored(self) -> None:
        """Only the amount token matters."""
        self.assertEqual(
            parse_comparable("5,00 €"), parse_comparable("5,00 kr")
        )

    def test_order_preserving(self) -> None:
        """Sorting by comparable value matches money ordering."""
        prices = ["0,99 €", "10,00 €", "9,99 €", "100,01 €", "100,00 €"]
        ordered = sorted(prices, key=parse_comparable)
        self.assertEqual(
            ordered,
            ["0,99 €", "9,99 €", "10,00 €", "100,00 €", "100,01 €"],
        )

    def test_non_numeric_raises(self) -> None:
        """A non-numeric amount token is malformed."""
        with self.assertRaises(MalformedPriceError):
            parse_comparable("abc €")

    def test_empty_raises(self) -> None:
        """An empty string is malformed."""
        with self.assertRaises(MalformedPriceError):
            parse_comparable("   ")

    def test_single_fraction_digit_raises(self) -> None:
        """Fractions must have exactly two digits."""
        with self.assertRaises(MalformedPriceError):
            parse_comparable("4,5 €")

    def test_grouped_thousands_raises(self) -> None:
        """Canonical prices carry a single separator."""
        with self.assertRaises(MalformedPriceError):
            parse_comparable("1.299,00 €")

    def test_malformed_is_value_error(self) -> None:
        """MalformedPriceError is catchable as ValueError."""
        with self.assertRaises(ValueError):
            parse_comparable("x")


class TestFormatPrice(unittest.TestCase):
    """format_price builds canonical strings."""

    def test_formats_with_default_separator(self) -> None:
        """Minor units become '{whole},{fraction} {unit}'."""
        self.assertEqual(format_price(42390, "€"), "423,90 €")

    def test_pads_fraction(self) -> None:
        """Fractions are always two digits."""
        self.assertEqual(format_price(5, "$"), "0,05 $")

    def test_custom_separator(self) -> None:
        """The separator can be overridden."""
        self.assertEqual(format_price(1999, "£", separator="."), "19.99 £")

    def test_result_is_canonical(self) -> None:
        """Formatted prices pass the canonical check and round trip."""
        price = format_price(123456, "kr")
        self.assertTrue(is_canonical(price))
        self.assertEqual(parse_comparable(price), 123456)

    def test_negative_rejected(self) -> None:
        """Negative amounts are refused."""
        with self.assertRaises(MalformedPriceError):
            format_price(-1, "€")

    def test_blank_unit_rejected(self) -> None:
        """A unit symbol is required."""
        with self.assertRaises(MalformedPriceError):
            format_price(100, "  ")


class TestIsCanonical(unittest.TestCase):
    """is_canonical enforces the full stored format."""

    def test_canonical_values(self) -> None:
        """Well-formed prices are accepted."""
        for price in ("423,90 €", "0,05 $", "19.99 £", "100,00 kr"):
            with self.subTest(price=price):
                self.assertTrue(is_canonical(price))

    def test_non_canonical_values(self) -> None:
        """Missing units, grouping or fractions are rejected."""
        for price in ("423,90", "12 €", "1.299,00 €", "4,5 €", "€ 4,50", ""):
            with self.subTest(price=price):
                self.assertFalse(is_canonical(price))


class TestPricesEqual(unittest.TestCase):
    """prices_equal compares by value, not by string."""

    def test_surface_format_difference_is_equal(self) -> None:
        """Separator differences do not make prices unequal."""
        self.assertTrue(prices_equal("5,00 €", "5.00 €"))

    def test_different_values(self) -> None:
        """Different amounts are unequal."""
        self.assertFalse(prices_equal("5,00 €", "5,01 €"))


if __name__ == "__main__":
    unittest.main()
