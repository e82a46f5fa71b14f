import asyncio
import os
import sys
import tempfile
from datetime import date, datetime, timezone
from decimal import Decimal

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db.models import CartLine, Product, Transaction  # noqa: E402
from db.store import SqliteStore  # noqa: E402
from pos.errors import PersistenceError  # noqa: E402


def make_product(
    id="p1",
    sku="SKU-1",
    name="Widget",
    price="4.50",
    category="General",
    stock=10,
    expiry_date=None,
) -> Product:
    return Product(id, sku, name, Decimal(price), category, stock, expiry_date)


def make_transaction(id="t1", total="10.80", method="cash", ts=None, lines=None) -> Transaction:
    lines = lines if lines is not None else (CartLine(make_product(), 2),)
    total = Decimal(total)
    return Transaction(
        id=id,
        timestamp=ts or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        items=tuple(lines),
        subtotal=total,
        tax=Decimal("0.00"),
        total=total,
        payment_method=method,
    )


FAR_FUTURE = date(2999, 1, 1)
LONG_AGO = date(2000, 1, 1)


class MemoryStore:
    """In-memory store; flip the fail_* flags to simulate a broken disk."""

    def __init__(self, products=None):
        self.products = list(products) if products is not None else None
        self.transactions = []
        self.fail_products = False
        self.fail_transactions = False

    async def load_products(self):
        return list(self.products) if self.products is not None else None

    async def replace_products(self, products):
        if self.fail_products:
            raise PersistenceError("disk full")
        self.products = list(products)

    async def load_transactions(self):
        return list(reversed(self.transactions))

    async def append_transaction(self, tx):
        if self.fail_transactions:
            raise PersistenceError("disk full")
        self.transactions.append(tx)


class TempStoreMixin:
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "test.sqlite")
        self.store = SqliteStore(self.db_path)

    def tearDown(self):
        self.temp_dir.cleanup()


class SlowLogStore(MemoryStore):
    """Holds every transaction write until `release` is set."""

    def __init__(self, products=None):
        super().__init__(products)
        self.release = asyncio.Event()
        self.writing = asyncio.Event()

    async def append_transaction(self, tx):
        self.writing.set()
        await self.release.wait()
        await super().append_transaction(tx)
