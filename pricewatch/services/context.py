# pricewatch/services/context.py

"""Explicitly constructed handle bundling the store and the services."""

from dataclasses import dataclass
from pathlib import Path

from pricewatch.scrapers.base_scraper import PriceFetcher
from pricewatch.scrapers.product_page_scraper import ProductPageScraper
from pricewatch.services.query_service import QueryService
from pricewatch.services.tracking_service import TrackingService
from pricewatch.services.update_service import UpdateService
from pricewatch.storage.tracker_db import TrackerDB


@dataclass
class TrackerContext:
    """One store connection and the services sharing it.

    Adapters build one per process (or per test) and pass it around
    instead of reaching for module-level state.
    """

    store: TrackerDB
    tracking: TrackingService
    updates: UpdateService
    queries: QueryService

    @classmethod
    def open(
        cls,
        db_path: Path | None = None,
        fetcher: PriceFetcher | None = None,
        scrape_timeout: float | None = None,
    ) -> "TrackerContext":
        """Open the database and wire up the services."""
        store = TrackerDB(db_path=db_path)
        price_fetcher = fetcher or ProductPageScraper()
        return cls(
            store=store,
            tracking=TrackingService(store, price_fetcher, scrape_timeout),
            updates=UpdateService(store, price_fetcher, scrape_timeout),
            queries=QueryService(store),
        )

    def close(self) -> None:
        """Release the database connection."""
        self.store.close()
