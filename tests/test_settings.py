# tests/test_settings.py

"""Tests for the Settings configuration class."""

import unittest
from pathlib import Path

from pricewatch.config.settings import Settings
from pricewatch.pricing.price_codec import format_price


class TestSettings(unittest.TestCase):
    """Verify Settings constants."""

    def test_request_delay_is_positive_float(self) -> None:
        """REQUEST_DELAY must be a positive number."""
        self.assertIsInstance(Settings.REQUEST_DELAY, float)
        self.assertGreater(Settings.REQUEST_DELAY, 0)

    def test_request_timeout_is_positive_int(self) -> None:
        """REQUEST_TIMEOUT must be a positive integer."""
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_max_retries_is_positive(self) -> None:
        """MAX_RETRIES must be >= 1."""
        self.assertGreaterEqual(Settings.MAX_RETRIES, 1)

    def test_circuit_breaker_threshold_positive(self) -> None:
        """CIRCUIT_BREAKER_THRESHOLD must be >= 1."""
        self.assertGreaterEqual(
            Settings.CIRCUIT_BREAKER_THRESHOLD, 1
        )

    def test_scrape_budget_positive(self) -> None:
        """The per-product scrape budget and worker count are positive."""
        self.assertGreater(Settings.SCRAPE_TIMEOUT, 0)
        self.assertGreaterEqual(Settings.UPDATE_WORKERS, 1)

    def test_currency_symbols_are_valid_units(self) -> None:
        """Every mapped symbol can be used in a canonical price."""
        for code, symbol in Settings.CURRENCY_SYMBOLS.items():
            with self.subTest(code=code):
                self.assertTrue(format_price(100, symbol).endswith(symbol))

    def test_default_currency_symbol_usable(self) -> None:
        """The fallback unit is a single non-blank token."""
        format_price(100, Settings.DEFAULT_CURRENCY_SYMBOL)

    def test_path_constants_are_paths(self) -> None:
        """Path-typed settings are Path instances."""
        self.assertIsInstance(Settings.BASE_DIR, Path)
        self.assertIsInstance(
            Settings.SELECTORS_PATH, Path
        )
        self.assertIsInstance(Settings.DB_PATH, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)

    def test_selectors_path_exists(self) -> None:
        """The selectors.json file must exist on disk."""
        self.assertTrue(Settings.SELECTORS_PATH.exists())

    def test_impersonate_browser_is_string(self) -> None:
        """IMPERSONATE_BROWSER must be a non-empty string."""
        self.assertIsInstance(
            Settings.IMPERSONATE_BROWSER, str
        )
        self.assertTrue(len(Settings.IMPERSONATE_BROWSER) > 0)

    def test_default_headers_has_accept_language(self) -> None:
        """DEFAULT_HEADERS must include Accept-Language."""
        self.assertIn(
            "Accept-Language", Settings.DEFAULT_HEADERS
        )


if __name__ == "__main__":
    unittest.main()
