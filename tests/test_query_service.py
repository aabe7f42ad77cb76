# tests/test_query_service.py

"""Tests for product listing and history lookups."""

import shutil
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

from pricewatch.models.errors import StoreError
from pricewatch.models.product import ProductSummary
from pricewatch.models.results import (
    HistorySuccess,
    ListSuccess,
    NameMissing,
    NameNotFound,
    NotRegistered,
    StoreFailure,
)
from pricewatch.pricing.history_compressor import (
    ChangeRow,
    CurrentPriceRow,
    HeaderRow,
)
from pricewatch.services.query_service import QueryService
from pricewatch.storage.tracker_db import TrackerDB


class TestQueryService(unittest.IsolatedAsyncioTestCase):
    """QueryService against a real temp SQLite store."""

    def setUp(self) -> None:
        """Create a temp store with one registered account."""
        self.tmp_dir = tempfile.mkdtemp()
        self.store = TrackerDB(db_path=Path(self.tmp_dir) / "test.db")
        account = self.store.create_account("u-1", "Alice")
        assert account is not None
        self.account = account
        self.service = QueryService(self.store)

    def tearDown(self) -> None:
        """Close the store and remove the temp dir."""
        self.store.close()
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def _track(self, name: str, *prices: str) -> int:
        """Track *name* with the given price log (first is initial)."""
        product = self.store.create_product(
            self.account.id,
            name,
            f"https://shop.example/{name}",
            prices[0],
            created_at=datetime(2100, 1, 1),
        )
        assert product is not None
        for day, price in enumerate(prices[1:], start=2):
            self.store.append_price_point(
                product.id, price, created_at=datetime(2100, 1, day),
            )
        return product.id

    # ── list_products ────────────────────────────────────

    async def test_list_not_registered(self) -> None:
        """Unknown identities get NotRegistered."""
        result = await self.service.list_products("ghost")
        self.assertIsInstance(result, NotRegistered)

    async def test_list_empty(self) -> None:
        """An account with no products lists nothing."""
        result = await self.service.list_products("u-1")
        self.assertEqual(result, ListSuccess(products=[]))

    async def test_list_shows_latest_price(self) -> None:
        """Each product is listed with its most recent price."""
        self._track("Phone", "100,00 €", "90,00 €")
        self._track("Mouse", "20,00 €")
        result = await self.service.list_products("u-1")
        assert isinstance(result, ListSuccess)
        self.assertEqual(
            result.products,
            [
                ProductSummary(
                    name="Phone",
                    price="90,00 €",
                    url="https://shop.example/Phone",
                ),
                ProductSummary(
                    name="Mouse",
                    price="20,00 €",
                    url="https://shop.example/Mouse",
                ),
            ],
        )

    async def test_list_store_failure(self) -> None:
        """Store errors become StoreFailure."""
        with patch.object(
            self.store, "list_products", side_effect=StoreError("boom"),
        ):
            result = await self.service.list_products("u-1")
        self.assertIsInstance(result, StoreFailure)

    # ── get_history ──────────────────────────────────────

    async def test_history_not_registered(self) -> None:
        """Registration is checked before the name."""
        result = await self.service.get_history("ghost", "")
        self.assertIsInstance(result, NotRegistered)

    async def test_history_name_missing(self) -> None:
        """A blank name is NameMissing."""
        result = await self.service.get_history("u-1", "  ")
        self.assertIsInstance(result, NameMissing)

    async def test_history_unknown_name(self) -> None:
        """An untracked name is NameNotFound carrying the name."""
        result = await self.service.get_history("u-1", "Nope")
        self.assertEqual(result, NameNotFound(name="Nope"))
        self.assertEqual(result.status, "name_wrong")

    async def test_history_other_account(self) -> None:
        """Another account's product is not visible."""
        self._track("Phone", "1,00 €")
        self.store.create_account("u-2", "Bob")
        result = await self.service.get_history("u-2", "Phone")
        self.assertIsInstance(result, NameNotFound)

    async def test_history_compressed_timeline(self) -> None:
        """The raw log is kept and the timeline collapses runs."""
        self._track(
            "Phone", "100,00 €", "100,00 €", "200,00 €", "200,00 €", "100,00 €",
        )
        result = await self.service.get_history("u-1", "phone")

        self.assertIsInstance(result, HistorySuccess)
        assert isinstance(result, HistorySuccess)
        self.assertEqual(len(result.price_points), 5)
        self.assertEqual(result.timeline[0], HeaderRow(name="Phone", count=5))
        self.assertEqual(result.timeline[1], CurrentPriceRow(price="100,00 €"))
        changes = [r for r in result.timeline if isinstance(r, ChangeRow)]
        self.assertEqual(
            [(c.created_at.day, c.price) for c in changes],
            [(4, "200,00 €"), (2, "100,00 €")],
        )

    async def test_history_malformed_stored_price(self) -> None:
        """A corrupt stored price surfaces as StoreFailure."""
        product_id = self._track("Phone", "1,00 €", "2,00 €")
        with self.store._conn:
            self.store._conn.execute(
                "UPDATE price_points SET price = 'garbage' WHERE product_id = ?",
                (product_id,),
            )
        result = await self.service.get_history("u-1", "Phone")
        self.assertIsInstance(result, StoreFailure)

    async def test_history_without_points(self) -> None:
        """A product with no points violates the invariant: StoreFailure."""
        product_id = self._track("Phone", "1,00 €")
        with self.store._conn:
            self.store._conn.execute(
                "DELETE FROM price_points WHERE product_id = ?",
                (product_id,),
            )
        result = await self.service.get_history("u-1", "Phone")
        self.assertIsInstance(result, StoreFailure)


if __name__ == "__main__":
    unittest.main()
