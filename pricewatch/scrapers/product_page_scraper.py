# pricewatch/scrapers/product_page_scraper.py

"""Generic product page scraper producing canonical price strings."""

import json
import re
from collections.abc import Iterator
from decimal import Decimal, InvalidOperation
from typing import Any
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from pricewatch.models.errors import MalformedPriceError
from pricewatch.pricing.price_codec import format_price
from pricewatch.scrapers.base_scraper import BaseScraper

# One amount: digit groups of three split by space, ' . or , with an
# optional one or two digit fraction, or a plain digit run.
_NUMBER_RE = re.compile(
    r"(?<![\d.,])"
    r"(?:\d{1,3}(?:[\s'.,]\d{3})+(?:[.,]\d{1,2})?|\d+(?:[.,]\d{1,2})?)"
    r"(?![\d])"
)

# Symbols recognised directly in price text, longest first
_TEXT_SYMBOLS: list[str] = ["zł", "kr", "CHF", "AED", "€", "$", "£", "¥"]

_CURRENCY_MARKERS: tuple[str, ...] = (*_TEXT_SYMBOLS, "EUR", "USD", "GBP")


def _next_to_currency(text: str, match: re.Match[str]) -> bool:
    before = text[:match.start()].rstrip()
    after = text[match.end():].lstrip()
    return before.endswith(_CURRENCY_MARKERS) or after.startswith(
        _CURRENCY_MARKERS
    )


def extract_amount(text: str | None) -> int | None:
    """Extract an amount in minor units from text like ``'1.299,00 €'``.

    When the text holds several numbers (``'Save 5 on 49,00 €'``) the
    first one written next to a currency marker wins, otherwise the
    first number.  The last ``.`` or ``,`` is the decimal separator when
    one or two digits follow it; otherwise every separator groups
    thousands.
    """
    if not text:
        return None
    matches = list(_NUMBER_RE.finditer(text))
    if not matches:
        return None
    match = next(
        (m for m in matches if _next_to_currency(text, m)), matches[0]
    )
    token = re.sub(r"[\s']", "", match.group(0))

    last_sep = max(token.rfind("."), token.rfind(","))
    whole, fraction = token, ""
    if last_sep != -1 and len(token) - last_sep - 1 in (1, 2):
        whole, fraction = token[:last_sep], token[last_sep + 1:]
    whole_digits = re.sub(r"\D", "", whole) or "0"
    return int(whole_digits) * 100 + int(fraction.ljust(2, "0"))


def _amount_from_value(value: Any) -> int | None:
    """Convert a structured-data price (number or string) to minor units."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return int(Decimal(str(value)).quantize(Decimal("0.01")) * 100)
        except InvalidOperation:
            return None
    if isinstance(value, str):
        return extract_amount(value)
    return None


class ProductPageScraper(BaseScraper):
    """Fetch a product page and extract its current price.

    Extraction order: JSON-LD ``Offer`` data, then price meta tags,
    then the CSS selectors configured for the page's host.
    """

    def __init__(self) -> None:
        super().__init__("product_page")

    def fetch_price(self, url: str) -> str | None:
        """Return the canonical price shown at *url*, or ``None``."""
        soup = self._get_page(url)
        if soup is None:
            self.logger.warning("[%s] Could not load %s", self.source_name, url)
            return None

        price = self.extract_price(soup, urlparse(url).netloc)
        if price is None:
            self.logger.warning(
                "[%s] No price found on %s", self.source_name, url,
            )
        else:
            self.logger.debug(
                "[%s] %s -> %s", self.source_name, url, price,
            )
        return price

    # ── Extraction ───────────────────────────────────────

    def extract_price(self, soup: BeautifulSoup, host: str) -> str | None:
        """Run every extraction strategy and return the first hit."""
        for amount, currency in (
            self._from_json_ld(soup),
            self._from_meta(soup),
            self._from_selectors(soup, host),
        ):
            if amount is None or amount <= 0:
                continue
            unit = self._unit_for(currency)
            try:
                return format_price(amount, unit)
            except MalformedPriceError:
                self.logger.warning(
                    "[%s] Unusable currency %r", self.source_name, currency,
                )
        return None

    def _unit_for(self, currency: str | None) -> str:
        """Map an ISO code or symbol to the symbol stored with prices."""
        if not currency:
            return self.settings.DEFAULT_CURRENCY_SYMBOL
        code = currency.strip()
        return self.settings.CURRENCY_SYMBOLS.get(code.upper(), code)

    @staticmethod
    def _iter_offers(data: Any) -> Iterator[dict[str, Any]]:
        """Walk JSON-LD data and yield every dict carrying a price."""
        if isinstance(data, list):
            for item in data:
                yield from ProductPageScraper._iter_offers(item)
        elif isinstance(data, dict):
            if "price" in data or "lowPrice" in data:
                yield data
            for key in ("offers", "@graph", "mainEntity"):
                if key in data:
                    yield from ProductPageScraper._iter_offers(data[key])

    def _from_json_ld(
        self, soup: BeautifulSoup,
    ) -> tuple[int | None, str | None]:
        """Read ``offers.price`` / ``priceCurrency`` from JSON-LD."""
        for script in soup.find_all("script", type="application/ld+json"):
            try:
                data = json.loads(script.get_text() or "")
            except json.JSONDecodeError:
                continue
            for offer in self._iter_offers(data):
                amount = _amount_from_value(
                    offer.get("price", offer.get("lowPrice"))
                )
                if amount:
                    currency = offer.get("priceCurrency")
                    return amount, str(currency) if currency else None
        return None, None

    @staticmethod
    def _meta_content(soup: BeautifulSoup, **attrs: str) -> str | None:
        tag = soup.find("meta", attrs=attrs)
        if isinstance(tag, Tag):
            content = tag.get("content")
            if isinstance(content, str) and content.strip():
                return content
        return None

    def _from_meta(
        self, soup: BeautifulSoup,
    ) -> tuple[int | None, str | None]:
        """Read Open Graph / microdata price meta tags."""
        amount_text = (
            self._meta_content(soup, property="product:price:amount")
            or self._meta_content(soup, property="og:price:amount")
            or self._meta_content(soup, itemprop="price")
        )
        if amount_text is None:
            return None, None
        currency = (
            self._meta_content(soup, property="product:price:currency")
            or self._meta_content(soup, property="og:price:currency")
            or self._meta_content(soup, itemprop="priceCurrency")
        )
        return extract_amount(amount_text), currency

    def _from_selectors(
        self, soup: BeautifulSoup, host: str,
    ) -> tuple[int | None, str | None]:
        """Fall back to the host's CSS selectors from selectors.json."""
        selectors = self.selectors_for(host)
        price_sel = selectors.get("price", "")
        if not price_sel:
            return None, None
        element = soup.select_one(price_sel)
        if element is None:
            return None, None

        raw = (
            element.get("content")
            or element.get("data-price")
            or element.get_text(" ", strip=True)
        )
        text = raw if isinstance(raw, str) else " ".join(raw)

        currency: str | None = None
        currency_sel = selectors.get("currency", "")
        if currency_sel:
            cur_el = soup.select_one(currency_sel)
            if cur_el is not None:
                cur_raw = cur_el.get("content") or cur_el.get_text(strip=True)
                currency = cur_raw if isinstance(cur_raw, str) and cur_raw else None
        if currency is None:
            currency = next(
                (s for s in _TEXT_SYMBOLS if s in text), None
            )
        return extract_amount(text), currency
