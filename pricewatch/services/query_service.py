# pricewatch/services/query_service.py

"""Read-only product listing and price history."""

import logging

from pricewatch.models.errors import (
    EmptyHistoryError,
    MalformedPriceError,
    StoreError,
)
from pricewatch.models.product import ProductSummary
from pricewatch.models.results import (
    HistoryResult,
    HistorySuccess,
    ListResult,
    ListSuccess,
    NameMissing,
    NameNotFound,
    NotRegistered,
    StoreFailure,
)
from pricewatch.pricing.history_compressor import compress_history
from pricewatch.storage.stores import TrackerStore

logger = logging.getLogger("pricewatch.query")


class QueryService:
    """Listing and history lookups for one account."""

    def __init__(self, store: TrackerStore) -> None:
        self.store = store

    async def list_products(self, identity: str) -> ListResult:
        """Every tracked product with its latest observed price."""
        try:
            account = self.store.find_account_by_identity(identity)
            if account is None:
                return NotRegistered()
            summaries: list[ProductSummary] = []
            for product in self.store.list_products(account.id):
                latest = self.store.latest_price_point(product.id)
                if latest is None:
                    return StoreFailure(
                        error=f"Product '{product.name}' has no price history"
                    )
                summaries.append(ProductSummary(
                    name=product.name,
                    price=latest.price,
                    url=product.url,
                ))
        except StoreError as exc:
            logger.error("list_products(%s) failed: %s", identity, exc, exc_info=True)
            return StoreFailure(error=str(exc))
        return ListSuccess(products=summaries)

    async def get_history(
        self, identity: str, name: str | None,
    ) -> HistoryResult:
        """Resolve an owned product and compress its price log."""
        name = (name or "").strip()
        try:
            account = self.store.find_account_by_identity(identity)
            if account is None:
                return NotRegistered()
            if not name:
                return NameMissing()
            product = self.store.find_product_by_name(account.id, name)
            if product is None:
                return NameNotFound(name=name)
            price_points = self.store.list_price_points(product.id)
        except StoreError as exc:
            logger.error("get_history(%s) failed: %s", identity, exc, exc_info=True)
            return StoreFailure(error=str(exc))

        try:
            timeline = list(compress_history(product.name, price_points))
        except (EmptyHistoryError, MalformedPriceError) as exc:
            logger.error("History of '%s' is unusable: %s", product.name, exc)
            return StoreFailure(error=str(exc))

        return HistorySuccess(
            product=product,
            price_points=price_points,
            timeline=timeline,
        )
