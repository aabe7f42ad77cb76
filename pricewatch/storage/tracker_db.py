# pricewatch/storage/tracker_db.py

"""SQLite-backed store for accounts, tracked products and price logs."""

import logging
import sqlite3
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from pricewatch.config.settings import Settings
from pricewatch.models.account import Account
from pricewatch.models.errors import MalformedPriceError, StoreError
from pricewatch.models.product import PricePoint, TrackedProduct, name_key
from pricewatch.pricing.price_codec import is_canonical

logger = logging.getLogger("pricewatch.store")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS accounts (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    identity     TEXT    NOT NULL UNIQUE,
    display_name TEXT    NOT NULL,
    created_at   TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS products (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    account_id INTEGER NOT NULL
               REFERENCES accounts(id) ON DELETE CASCADE,
    name       TEXT    NOT NULL,
    name_key   TEXT    NOT NULL,
    url        TEXT    NOT NULL,
    created_at TEXT    NOT NULL,
    UNIQUE (account_id, name_key)
);

CREATE TABLE IF NOT EXISTS price_points (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id INTEGER NOT NULL
               REFERENCES products(id) ON DELETE CASCADE,
    price      TEXT    NOT NULL,
    created_at TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_points_product
    ON price_points(product_id, id);
"""

_ACCOUNT_COLUMNS = "id, identity, display_name, created_at"
_PRODUCT_COLUMNS = "id, account_id, name, url, created_at"


def _check_price(price: str) -> None:
    """Refuse to persist a non-canonical price."""
    if not is_canonical(price):
        raise MalformedPriceError(price, "not canonical")


def _account_from_row(row: tuple[Any, ...]) -> Account:
    return Account(
        id=row[0],
        identity=row[1],
        display_name=row[2],
        created_at=datetime.fromisoformat(row[3]),
    )


def _product_from_row(row: tuple[Any, ...]) -> TrackedProduct:
    return TrackedProduct(
        id=row[0],
        account_id=row[1],
        name=row[2],
        url=row[3],
        created_at=datetime.fromisoformat(row[4]),
    )


def _point_from_row(row: tuple[Any, ...]) -> PricePoint:
    return PricePoint(
        price=row[0],
        created_at=datetime.fromisoformat(row[1]),
    )


class TrackerDB:
    """SQLite implementation of the account and product stores.

    One connection is shared by every caller; a lock serialises access
    and each public method runs in its own transaction, so conditional
    inserts (``UNIQUE`` + ``ON CONFLICT DO NOTHING``) are atomic.
    """

    def __init__(
        self, db_path: Path | None = None,
    ) -> None:
        path = db_path or Settings.DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(
                str(path), check_same_thread=False,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open database {path}: {exc}") from exc
        logger.debug("TrackerDB opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        """Run a block in one transaction, mapping sqlite errors."""
        with self._lock:
            try:
                with self._conn:
                    yield self._conn.cursor()
            except sqlite3.Error as exc:
                logger.error("Store operation failed: %s", exc, exc_info=True)
                raise StoreError(str(exc)) from exc

    # ── Accounts ─────────────────────────────────────────

    def create_account(
        self,
        identity: str,
        display_name: str,
        created_at: datetime | None = None,
    ) -> Account | None:
        """Create an account; ``None`` if the identity is taken."""
        ts = (created_at or datetime.now()).isoformat()
        with self._transaction() as cur:
            cur.execute(
                "INSERT INTO accounts (identity, display_name, created_at) "
                "VALUES (?, ?, ?) "
                "ON CONFLICT(identity) DO NOTHING",
                (identity, display_name, ts),
            )
            if cur.rowcount == 0:
                return None
            account_id = cur.lastrowid
        logger.info("Created account %s for %s", account_id, identity)
        return Account(
            id=int(account_id or 0),
            identity=identity,
            display_name=display_name,
            created_at=datetime.fromisoformat(ts),
        )

    def find_account_by_identity(self, identity: str) -> Account | None:
        """Look up an account by its external identity."""
        with self._transaction() as cur:
            row = cur.execute(
                f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE identity = ?",
                (identity,),
            ).fetchone()
        return _account_from_row(row) if row else None

    # ── Products ─────────────────────────────────────────

    def create_product(
        self,
        account_id: int,
        name: str,
        url: str,
        initial_price: str,
        created_at: datetime | None = None,
    ) -> TrackedProduct | None:
        """Insert a product and its first price point together.

        Returns ``None`` when the account already tracks the name.
        """
        _check_price(initial_price)
        ts = (created_at or datetime.now()).isoformat()
        with self._transaction() as cur:
            cur.execute(
                "INSERT INTO products "
                "(account_id, name, name_key, url, created_at) "
                "VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT(account_id, name_key) DO NOTHING",
                (account_id, name, name_key(name), url, ts),
            )
            if cur.rowcount == 0:
                return None
            product_id = int(cur.lastrowid or 0)
            cur.execute(
                "INSERT INTO price_points (product_id, price, created_at) "
                "VALUES (?, ?, ?)",
                (product_id, initial_price, ts),
            )
        logger.info(
            "Tracking product %d '%s' for account %d at %s",
            product_id, name, account_id, initial_price,
        )
        return TrackedProduct(
            id=product_id,
            account_id=account_id,
            name=name,
            url=url,
            created_at=datetime.fromisoformat(ts),
        )

    def find_product_by_name(
        self, account_id: int, name: str,
    ) -> TrackedProduct | None:
        """Find an owned product by name, case-insensitively."""
        with self._transaction() as cur:
            row = cur.execute(
                f"SELECT {_PRODUCT_COLUMNS} FROM products "
                "WHERE account_id = ? AND name_key = ?",
                (account_id, name_key(name)),
            ).fetchone()
        return _product_from_row(row) if row else None

    def delete_product(self, product_id: int) -> bool:
        """Delete a product; its price points cascade."""
        with self._transaction() as cur:
            cur.execute(
                "DELETE FROM products WHERE id = ?", (product_id,),
            )
            deleted = cur.rowcount > 0
        if deleted:
            logger.info("Deleted product %d", product_id)
        return deleted

    def list_products(self, account_id: int) -> list[TrackedProduct]:
        """All products owned by an account, in creation order."""
        with self._transaction() as cur:
            rows = cur.execute(
                f"SELECT {_PRODUCT_COLUMNS} FROM products "
                "WHERE account_id = ? ORDER BY id ASC",
                (account_id,),
            ).fetchall()
        return [_product_from_row(r) for r in rows]

    # ── Price points ─────────────────────────────────────

    def append_price_point(
        self,
        product_id: int,
        price: str,
        created_at: datetime | None = None,
    ) -> PricePoint:
        """Append one observation to a product's log."""
        return self.append_price_points(
            [(product_id, price)], created_at=created_at,
        )[0]

    def append_price_points(
        self,
        observations: Sequence[tuple[int, str]],
        created_at: datetime | None = None,
    ) -> list[PricePoint]:
        """Append observations in one transaction, all or nothing."""
        for _, price in observations:
            _check_price(price)
        ts = (created_at or datetime.now()).isoformat()
        with self._transaction() as cur:
            cur.executemany(
                "INSERT INTO price_points (product_id, price, created_at) "
                "VALUES (?, ?, ?)",
                [(pid, price, ts) for pid, price in observations],
            )
        if observations:
            logger.info(
                "Recorded %d price points at %s", len(observations), ts,
            )
        when = datetime.fromisoformat(ts)
        return [PricePoint(price=price, created_at=when) for _, price in observations]

    def list_price_points(self, product_id: int) -> list[PricePoint]:
        """Return a product's price log in append order, oldest first.

        Ordered by row id rather than ``created_at`` so a clock that
        steps back never reorders the log.
        """
        with self._transaction() as cur:
            rows = cur.execute(
                "SELECT price, created_at FROM price_points "
                "WHERE product_id = ? ORDER BY id ASC",
                (product_id,),
            ).fetchall()
        return [_point_from_row(r) for r in rows]

    def latest_price_point(self, product_id: int) -> PricePoint | None:
        """Return the most recently appended observation for a product."""
        with self._transaction() as cur:
            row = cur.execute(
                "SELECT price, created_at FROM price_points "
                "WHERE product_id = ? ORDER BY id DESC "
                "LIMIT 1",
                (product_id,),
            ).fetchone()
        return _point_from_row(row) if row else None
