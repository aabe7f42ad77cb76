# pricewatch/config/settings.py

"""Central configuration for the pricewatch tracker."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the pricewatch tracker."""

    # --- Scraping ---
    REQUEST_DELAY: float = 1.0          # Seconds between requests
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures

    # --- Resilience ---
    CIRCUIT_BREAKER_THRESHOLD: int = 3  # Consecutive failures to trip
    CIRCUIT_BREAKER_COOLDOWN: float = 60.0  # Seconds before half-open
    MAX_DELAY_MULTIPLIER: int = 8       # Cap for adaptive backoff
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Updates ---
    SCRAPE_TIMEOUT: float = float(
        os.getenv("PRICEWATCH_SCRAPE_TIMEOUT", "60")
    )                                   # Per-product budget, whole fetch
    UPDATE_WORKERS: int = int(
        os.getenv("PRICEWATCH_UPDATE_WORKERS", "4")
    )                                   # Concurrent scrapes per batch

    # --- Prices ---
    PRICE_SEPARATOR: str = ","          # Between whole and fractional units
    DEFAULT_CURRENCY_SYMBOL: str = os.getenv(
        "PRICEWATCH_DEFAULT_CURRENCY", "€"
    )                                   # When a page names no currency
    CURRENCY_SYMBOLS: dict[str, str] = {
        "EUR": "€",
        "USD": "$",
        "GBP": "£",
        "JPY": "¥",
        "SEK": "kr",
        "NOK": "kr",
        "DKK": "kr",
        "CHF": "CHF",
        "PLN": "zł",
        "AED": "AED",
    }

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "pricewatch" / "config" / "selectors.json"
    LOGS_DIR: Path = BASE_DIR / "logs"
    DATA_DIR: Path = BASE_DIR / "data"
    DB_PATH: Path = Path(
        os.getenv("PRICEWATCH_DB_PATH", str(DATA_DIR / "pricewatch.db"))
    )

    # --- Logging ---
    CONSOLE_LOG_LEVEL: str = os.getenv(
        "PRICEWATCH_LOG_LEVEL", "WARNING"
    )                                   # stderr threshold; the run file logs DEBUG
    LOG_RETENTION: int = int(
        os.getenv("PRICEWATCH_LOG_RETENTION", "20")
    )                                   # Run logs kept in LOGS_DIR

    # --- Identity ---
    DEFAULT_USER: str | None = os.getenv("PRICEWATCH_USER")
