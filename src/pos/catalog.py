from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from db.models import Product
from pos.errors import DuplicateIdentity, InvalidProduct, NotFound
from utils.logger import get_logger

_logger = get_logger(__name__)

# dashboard, inventory and insights views
LOW_STOCK_THRESHOLD = 10
# register grid highlight
REGISTER_LOW_STOCK_THRESHOLD = 5

ALL_CATEGORIES = "All"


def is_expired(p: Product, as_of: Optional[date] = None) -> bool:
    if p.expiry_date is None:
        return False
    return p.expiry_date < (as_of or date.today())


def is_low_stock(p: Product, threshold: int = LOW_STOCK_THRESHOLD) -> bool:
    return p.stock < threshold


def validate_product(p: Product) -> None:
    """Raise InvalidProduct if the record cannot be stored in the catalog."""
    if not str(p.id).strip():
        raise InvalidProduct("Product id is required.")
    if not p.name.strip() or not p.sku.strip():
        raise InvalidProduct("Name and SKU are required.")
    price = Decimal(p.price)
    if not price.is_finite():
        raise InvalidProduct("Price must be a number.")
    if price < 0:
        raise InvalidProduct("Price cannot be negative.")
    if p.stock < 0:
        raise InvalidProduct("Stock cannot be negative.")


class Catalog:
    """
    The authoritative list of sellable products.

    Reads are served from memory. Every mutation builds the new list, hands it
    to the store, and only swaps it in once the store accepted it.
    """

    def __init__(self, store, products: Optional[Iterable[Product]] = None):
        self._store = store
        self._products: List[Product] = list(products or [])
        self.needs_sync = False

    async def load(self, seed: Optional[Iterable[Product]] = None) -> List[Product]:
        """
        Read the catalog snapshot from the store. If none was ever saved and a
        seed is given, persist and use the seed instead.
        """
        products = await self._store.load_products()
        if products is None:
            products = list(seed or [])
            if products:
                _logger.info(f"No catalog snapshot found, seeding {len(products)} products.")
                await self._store.replace_products(products)
        self._products = products
        return self.list_products()

    # ---------------------------
    # Queries
    # ---------------------------

    def list_products(self) -> List[Product]:
        return list(self._products)

    def __len__(self) -> int:
        return len(self._products)

    def find(self, product_id: str) -> Optional[Product]:
        for p in self._products:
            if p.id == product_id:
                return p
        return None

    def get(self, product_id: str) -> Product:
        p = self.find(product_id)
        if p is None:
            raise NotFound("Product", product_id)
        return p

    def categories(self) -> List[str]:
        return sorted({p.category for p in self._products})

    def search(self, term: str = "", category: Optional[str] = None) -> List[Product]:
        """Case-insensitive match on name or SKU, optionally within one category."""
        needle = (term or "").strip().lower()
        results = []
        for p in self._products:
            if category and category != ALL_CATEGORIES and p.category != category:
                continue
            if needle and needle not in p.name.lower() and needle not in p.sku.lower():
                continue
            results.append(p)
        return results

    # ---------------------------
    # Mutations
    # ---------------------------

    async def _commit(self, products: List[Product]) -> None:
        await self._store.replace_products(products)
        self._products = products
        self.needs_sync = False

    async def add_product(self, p: Product) -> Product:
        validate_product(p)
        if self.find(p.id) is not None:
            raise DuplicateIdentity(p.id)
        await self._commit([*self._products, p])
        _logger.info(f"Added product {p.id} ({p.name}).")
        return p

    async def update_product(self, p: Product) -> Product:
        validate_product(p)
        self.get(p.id)
        await self._commit([p if cur.id == p.id else cur for cur in self._products])
        _logger.info(f"Updated product {p.id}.")
        return p

    async def delete_product(self, product_id: str) -> None:
        self.get(product_id)
        await self._commit([p for p in self._products if p.id != product_id])
        _logger.info(f"Deleted product {product_id}.")

    async def decrement_stock(self, items: Iterable[Tuple[str, int]]) -> List[Product]:
        """
        Subtract sold quantities, clamping at zero. Ids no longer in the
        catalog are skipped. Returns the products that changed.
        """
        sold: Dict[str, int] = {}
        for product_id, qty in items:
            sold[product_id] = sold.get(product_id, 0) + qty

        changed: List[Product] = []
        updated: List[Product] = []
        for p in self._products:
            if p.id in sold:
                p = p.with_stock(max(0, p.stock - sold.pop(p.id)))
                changed.append(p)
            updated.append(p)
        for missing in sold:
            _logger.debug(f"Stock decrement skipped for missing product {missing}.")

        # memory always reflects the sale; needs_sync stays set until a save lands
        self._products = updated
        self.needs_sync = True
        await self.sync()
        return changed

    async def sync(self) -> None:
        """Write the in-memory catalog back to the store."""
        await self._store.replace_products(self._products)
        self.needs_sync = False
