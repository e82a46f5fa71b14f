# src/db/store.py
from __future__ import annotations

import json
import sqlite3
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional, Protocol

from db import serde
from db.database import connect
from db.models import Product, Transaction
from pos.errors import PersistenceError
from utils.logger import get_logger

_logger = get_logger(__name__)

CATALOG_SNAPSHOT = "catalog"

SEED_PRODUCTS: List[Product] = [
    Product("1", "BV-001", "Organic Almond Milk", Decimal("4.50"), "Dairy", 24, date(2024, 12, 31)),
    Product("2", "BK-102", "Whole Wheat Sourdough", Decimal("6.00"), "Bakery", 5, date(2023, 10, 20)),
    Product("3", "SN-554", "Dark Chocolate Bar", Decimal("3.25"), "Snacks", 100, date(2025, 5, 15)),
    Product("4", "FV-201", "Honeycrisp Apple", Decimal("1.20"), "Produce", 0, date(2023, 11, 1)),
    Product("5", "BV-005", "Sparkling Water Lemon", Decimal("1.50"), "Beverages", 45, date(2025, 1, 1)),
]


class Store(Protocol):
    """Durable home of the catalog snapshot and the transaction log."""

    async def load_products(self) -> Optional[List[Product]]: ...

    async def replace_products(self, products: List[Product]) -> None: ...

    async def load_transactions(self) -> List[Transaction]: ...

    async def append_transaction(self, tx: Transaction) -> None: ...


def _row_to_product(row) -> Product:
    return Product(
        id=row["id"],
        sku=row["sku"],
        name=row["name"],
        price=Decimal(row["price"]),
        category=row["category"],
        stock=int(row["stock"]),
        expiry_date=date.fromisoformat(row["expiry_date"]) if row["expiry_date"] else None,
    )


def _row_to_transaction(row) -> Transaction:
    return Transaction(
        id=row["id"],
        timestamp=datetime.fromisoformat(row["ts"]),
        items=tuple(serde.line_from_dict(d) for d in json.loads(row["items"])),
        subtotal=Decimal(row["subtotal"]),
        tax=Decimal(row["tax"]),
        total=Decimal(row["total"]),
        payment_method=row["payment_method"],
    )


class SqliteStore:
    """
    Store backed by a single SQLite file through aiosqlite.

    Every write commits before returning, so an awaited write is durable.
    sqlite errors are re-raised as PersistenceError.
    """

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path

    # ---------------------------
    # Catalog
    # ---------------------------

    async def load_products(self) -> Optional[List[Product]]:
        """Return the saved catalog in order, or None if it was never saved."""
        try:
            async with connect(self.db_path) as conn:
                cur = await conn.execute(
                    "SELECT 1 FROM snapshots WHERE name = ?;", (CATALOG_SNAPSHOT,)
                )
                saved = await cur.fetchone()
                await cur.close()
                if not saved:
                    return None
                cur = await conn.execute(
                    """
                    SELECT id, sku, name, price, category, stock, expiry_date
                    FROM products
                    ORDER BY position;
                    """
                )
                rows = await cur.fetchall()
                await cur.close()
        except sqlite3.Error as e:
            _logger.error(f"Failed to load catalog: {e}")
            raise PersistenceError(f"Could not load catalog: {e}") from e
        return [_row_to_product(r) for r in rows]

    async def replace_products(self, products: List[Product]) -> None:
        """Overwrite the whole catalog snapshot in one sqlite transaction."""
        try:
            async with connect(self.db_path) as conn:
                await conn.execute("DELETE FROM products;")
                await conn.executemany(
                    """
                    INSERT INTO products(id, position, sku, name, price, category, stock, expiry_date)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    [
                        (
                            p.id,
                            pos,
                            p.sku,
                            p.name,
                            str(p.price),
                            p.category,
                            p.stock,
                            p.expiry_date.isoformat() if p.expiry_date else None,
                        )
                        for pos, p in enumerate(products)
                    ],
                )
                await conn.execute(
                    "INSERT OR REPLACE INTO snapshots(name, saved_at) VALUES (?, ?);",
                    (CATALOG_SNAPSHOT, datetime.now(timezone.utc).isoformat()),
                )
                await conn.commit()
        except sqlite3.Error as e:
            _logger.error(f"Failed to save catalog: {e}")
            raise PersistenceError(f"Could not save catalog: {e}") from e
        _logger.debug(f"Catalog saved ({len(products)} products).")

    # ---------------------------
    # Transaction Log
    # ---------------------------

    async def load_transactions(self) -> List[Transaction]:
        """Return all transactions, most recent first."""
        try:
            async with connect(self.db_path) as conn:
                cur = await conn.execute(
                    """
                    SELECT id, ts, items, subtotal, tax, total, payment_method
                    FROM transactions
                    ORDER BY seq DESC;
                    """
                )
                rows = await cur.fetchall()
                await cur.close()
        except sqlite3.Error as e:
            _logger.error(f"Failed to load transactions: {e}")
            raise PersistenceError(f"Could not load transactions: {e}") from e
        return [_row_to_transaction(r) for r in rows]

    async def append_transaction(self, tx: Transaction) -> None:
        items = json.dumps([serde.line_to_dict(line) for line in tx.items])
        try:
            async with connect(self.db_path) as conn:
                await conn.execute(
                    """
                    INSERT INTO transactions(id, ts, items, subtotal, tax, total, payment_method)
                    VALUES (?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        tx.id,
                        tx.timestamp.isoformat(),
                        items,
                        str(tx.subtotal),
                        str(tx.tax),
                        str(tx.total),
                        tx.payment_method,
                    ),
                )
                await conn.commit()
        except sqlite3.Error as e:
            _logger.error(f"Failed to record transaction {tx.id}: {e}")
            raise PersistenceError(f"Could not record transaction: {e}") from e
        _logger.debug(f"Transaction {tx.id} recorded.")
