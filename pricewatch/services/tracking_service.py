# pricewatch/services/tracking_service.py

"""Account registration and adding/removing tracked products."""

import logging

from pricewatch.config.settings import Settings
from pricewatch.models.errors import MalformedPriceError, StoreError
from pricewatch.models.results import (
    AddResult,
    AddSuccess,
    DuplicateAccount,
    NameMissing,
    NotRegistered,
    ProductExists,
    ProductNotFound,
    RegisterResult,
    RegisterSuccess,
    RemoveResult,
    RemoveSuccess,
    ScrapeFailed,
    StoreFailure,
    UrlMissing,
)
from pricewatch.scrapers.base_scraper import PriceFetcher
from pricewatch.services.price_fetching import fetch_canonical_price
from pricewatch.storage.stores import TrackerStore

logger = logging.getLogger("pricewatch.tracking")


class TrackingService:
    """Mutating account and product operations.

    Validation runs in a fixed order (registration, field presence,
    uniqueness or existence, then the external scrape) because each
    failure is reported to the user as its own outcome.
    """

    def __init__(
        self,
        store: TrackerStore,
        fetcher: PriceFetcher,
        scrape_timeout: float | None = None,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.scrape_timeout = scrape_timeout or Settings.SCRAPE_TIMEOUT

    async def register(
        self, identity: str, display_name: str,
    ) -> RegisterResult:
        """Create an account for *identity* unless one exists."""
        try:
            account = self.store.create_account(identity, display_name)
        except StoreError as exc:
            logger.error("register(%s) failed: %s", identity, exc, exc_info=True)
            return StoreFailure(error=str(exc))

        if account is None:
            logger.info("Duplicate registration for %s", identity)
            return DuplicateAccount()
        return RegisterSuccess(account=account)

    async def add_product(
        self,
        identity: str,
        name: str | None,
        url: str | None,
    ) -> AddResult:
        """Start tracking *url* under *name* with a fresh initial price."""
        name = (name or "").strip()
        url = (url or "").strip()
        try:
            account = self.store.find_account_by_identity(identity)
            if account is None:
                return NotRegistered()
            if not name:
                return NameMissing()
            if not url:
                return UrlMissing()
            if self.store.find_product_by_name(account.id, name) is not None:
                return ProductExists()
        except StoreError as exc:
            logger.error("add_product(%s) failed: %s", identity, exc, exc_info=True)
            return StoreFailure(error=str(exc))

        price = await fetch_canonical_price(
            self.fetcher, url, self.scrape_timeout,
        )
        if price is None:
            logger.info("Not tracking '%s': unable to scrape %s", name, url)
            return ScrapeFailed(url=url)

        try:
            product = self.store.create_product(account.id, name, url, price)
        except MalformedPriceError as exc:
            logger.warning("Scraped price rejected by store: %s", exc)
            return ScrapeFailed(url=url)
        except StoreError as exc:
            logger.error("add_product(%s) failed: %s", identity, exc, exc_info=True)
            return StoreFailure(error=str(exc))

        # Lost a race with a concurrent add of the same name
        if product is None:
            return ProductExists()
        return AddSuccess(product=product, price=price)

    async def remove_product(
        self, identity: str, name: str | None,
    ) -> RemoveResult:
        """Stop tracking the named product and drop its history."""
        name = (name or "").strip()
        try:
            account = self.store.find_account_by_identity(identity)
            if account is None:
                return NotRegistered()
            if not name:
                return NameMissing()
            product = self.store.find_product_by_name(account.id, name)
            if product is None:
                return ProductNotFound()
            if not self.store.delete_product(product.id):
                return ProductNotFound()
        except StoreError as exc:
            logger.error("remove_product(%s) failed: %s", identity, exc, exc_info=True)
            return StoreFailure(error=str(exc))
        return RemoveSuccess()
