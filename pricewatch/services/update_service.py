# pricewatch/services/update_service.py

"""Batch re-scrape of every product an account tracks."""

import asyncio
import logging

from pricewatch.config.settings import Settings
from pricewatch.models.errors import MalformedPriceError, StoreError
from pricewatch.models.product import PriceChange, PricePoint, TrackedProduct
from pricewatch.models.results import (
    NotRegistered,
    StoreFailure,
    UpdateResult,
    UpdateSuccess,
)
from pricewatch.pricing.price_codec import prices_equal
from pricewatch.scrapers.base_scraper import PriceFetcher
from pricewatch.services.price_fetching import fetch_canonical_price
from pricewatch.storage.stores import TrackerStore

logger = logging.getLogger("pricewatch.update")


class UpdateService:
    """Re-fetch current prices and report which ones changed.

    Every successful scrape appends a price point, changed or not, so
    the stored log stays a faithful record of observations; collapsing
    unchanged runs is left to the history view.  Failed scrapes are
    skipped for this cycle and never abort the batch.
    """

    def __init__(
        self,
        store: TrackerStore,
        fetcher: PriceFetcher,
        scrape_timeout: float | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.scrape_timeout = scrape_timeout or Settings.SCRAPE_TIMEOUT
        self.max_workers = max(1, max_workers or Settings.UPDATE_WORKERS)

    async def _scrape_all(
        self, products: list[TrackedProduct],
    ) -> list[str | None]:
        """Scrape every product through a bounded pool, in product order."""
        semaphore = asyncio.Semaphore(self.max_workers)

        async def scrape_one(product: TrackedProduct) -> str | None:
            async with semaphore:
                return await fetch_canonical_price(
                    self.fetcher, product.url, self.scrape_timeout,
                )

        return list(
            await asyncio.gather(*(scrape_one(p) for p in products))
        )

    async def update_prices(self, identity: str) -> UpdateResult:
        """Scrape all of *identity*'s products and record the results."""
        try:
            account = self.store.find_account_by_identity(identity)
            if account is None:
                return NotRegistered()
            products = self.store.list_products(account.id)
            latest: dict[int, PricePoint | None] = {
                p.id: self.store.latest_price_point(p.id) for p in products
            }
        except StoreError as exc:
            logger.error("update_prices(%s) failed: %s", identity, exc, exc_info=True)
            return StoreFailure(error=str(exc))

        new_prices = await self._scrape_all(products)

        observations: list[tuple[int, str]] = []
        changed: list[PriceChange] = []
        failed = 0
        for product, new_price in zip(products, new_prices):
            if new_price is None:
                failed += 1
                continue
            observations.append((product.id, new_price))

            previous = latest.get(product.id)
            if previous is None:
                logger.warning(
                    "Product %d '%s' had no stored price", product.id, product.name,
                )
                continue
            try:
                unchanged = prices_equal(previous.price, new_price)
            except MalformedPriceError as exc:
                logger.error("Stored price for '%s' is malformed: %s", product.name, exc)
                return StoreFailure(error=str(exc))
            if not unchanged:
                changed.append(PriceChange(
                    product=product.name,
                    old_price=previous.price,
                    new_price=new_price,
                ))

        try:
            await asyncio.to_thread(
                self.store.append_price_points, observations,
            )
        except (StoreError, MalformedPriceError) as exc:
            logger.error("update_prices(%s) failed: %s", identity, exc, exc_info=True)
            return StoreFailure(error=str(exc))

        logger.info(
            "Updated %d products for %s: %d changed, %d failed",
            len(products), identity, len(changed), failed,
        )
        return UpdateSuccess(attempted=len(products), changed=changed)
