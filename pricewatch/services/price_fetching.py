# pricewatch/services/price_fetching.py

"""Run the scrape collaborator off the event loop with a deadline."""

import asyncio
import logging

from pricewatch.models.errors import MalformedPriceError
from pricewatch.pricing.price_codec import is_canonical, parse_comparable
from pricewatch.scrapers.base_scraper import PriceFetcher

logger = logging.getLogger("pricewatch.fetching")


async def fetch_canonical_price(
    fetcher: PriceFetcher,
    url: str,
    timeout: float,
) -> str | None:
    """Fetch the current price for *url*, or ``None`` on any failure.

    The blocking fetch runs in a worker thread.  Exceeding *timeout*,
    an exception from the fetcher, no price, or a price that is not
    canonical all count as a failed scrape.
    """
    try:
        price = await asyncio.wait_for(
            asyncio.to_thread(fetcher.fetch_price, url),
            timeout=timeout,
        )
    except TimeoutError:
        logger.warning("Scrape of %s timed out after %.1fs", url, timeout)
        return None
    except Exception as exc:
        logger.warning(
            "Scrape of %s failed: %s", url, exc, exc_info=True,
        )
        return None

    if price is None:
        logger.info("No price extracted from %s", url)
        return None

    try:
        parse_comparable(price)
    except MalformedPriceError as exc:
        logger.warning("Discarding scraped price from %s: %s", url, exc)
        return None
    if not is_canonical(price):
        logger.warning(
            "Discarding non-canonical price %r from %s", price, url,
        )
        return None
    return price
