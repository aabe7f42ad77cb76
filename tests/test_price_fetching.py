# tests/test_price_fetching.py

"""Tests for the deadline-bounded scrape wrapper."""

import threading
import unittest

from pricewatch.services.price_fetching import fetch_canonical_price


class CannedFetcher:
    """Returns (or raises) a fixed value."""

    def __init__(self, value: str | None | Exception) -> None:
        self.value = value

    def fetch_price(self, url: str) -> str | None:
        if isinstance(self.value, Exception):
            raise self.value
        return self.value


class TestFetchCanonicalPrice(unittest.IsolatedAsyncioTestCase):
    """fetch_canonical_price turns every failure into None."""

    async def test_returns_canonical_price(self) -> None:
        price = await fetch_canonical_price(
            CannedFetcher("423,90 €"), "https://x.example", 1,
        )
        self.assertEqual(price, "423,90 €")

    async def test_none_price(self) -> None:
        price = await fetch_canonical_price(
            CannedFetcher(None), "https://x.example", 1,
        )
        self.assertIsNone(price)

    async def test_exception_swallowed(self) -> None:
        """Fetcher exceptions never escape."""
        price = await fetch_canonical_price(
            CannedFetcher(ValueError("bad html")), "https://x.example", 1,
        )
        self.assertIsNone(price)

    async def test_malformed_price(self) -> None:
        price = await fetch_canonical_price(
            CannedFetcher("call for price"), "https://x.example", 1,
        )
        self.assertIsNone(price)

    async def test_missing_fraction_not_canonical(self) -> None:
        """Parseable but not canonical prices are rejected."""
        price = await fetch_canonical_price(
            CannedFetcher("12 €"), "https://x.example", 1,
        )
        self.assertIsNone(price)

    async def test_timeout(self) -> None:
        """A fetch outliving the deadline yields None."""
        release = threading.Event()

        class Hanging:
            def fetch_price(self, url: str) -> str | None:
                release.wait(5)
                return "1,00 €"

        try:
            price = await fetch_canonical_price(
                Hanging(), "https://x.example", 0.05,
            )
        finally:
            release.set()
        self.assertIsNone(price)


if __name__ == "__main__":
    unittest.main()
