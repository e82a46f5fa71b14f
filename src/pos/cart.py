from __future__ import annotations

import warnings
from typing import Dict, Iterator, List, Optional

from db.models import CartLine, Product
from pos.catalog import Catalog, is_expired
from pos.errors import ExpiredWarning, InvalidState, OutOfStock, StockExceeded
from utils.logger import get_logger

_logger = get_logger(__name__)


def within_stock(quantity: int, product: Product) -> bool:
    """The one stock-ceiling rule, shared by add and quantity edits."""
    return quantity <= product.stock


class Cart:
    """
    The order in progress: product id -> CartLine, in insertion order.

    Stock is never reserved. Each mutation re-reads the live product from the
    catalog and checks the new quantity against its current stock.
    """

    def __init__(self, catalog: Catalog):
        self._catalog = catalog
        self._lines: Dict[str, CartLine] = {}
        self._frozen = False

    # ---------------------------
    # Read side
    # ---------------------------

    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def get(self, product_id: str) -> Optional[CartLine]:
        return self._lines.get(product_id)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines())

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._lines

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ---------------------------
    # Checkout hooks
    # ---------------------------

    def freeze(self) -> None:
        self._frozen = True

    def thaw(self) -> None:
        self._frozen = False

    # ---------------------------
    # Mutations
    # ---------------------------

    def _ensure_open(self) -> None:
        if self._frozen:
            raise InvalidState("Cart is locked while payment is in progress.")

    def _live(self, product: Product) -> Product:
        return self._catalog.find(product.id) or product

    def add_item(self, product: Product) -> CartLine:
        """
        Add one unit of a product.

        Raises OutOfStock when the product has no stock and StockExceeded when
        the cart already holds every unit. Expired products are accepted with
        an ExpiredWarning.
        """
        self._ensure_open()
        live = self._live(product)
        if live.stock <= 0:
            raise OutOfStock(live.id, live.name)

        existing = self._lines.get(live.id)
        new_qty = existing.quantity + 1 if existing else 1
        if not within_stock(new_qty, live):
            raise StockExceeded(live.id, live.stock)

        if is_expired(live):
            warnings.warn(
                ExpiredWarning(f"Warning: {live.name} is expired!"), stacklevel=2
            )

        line = CartLine(product=live, quantity=new_qty)
        self._lines[live.id] = line
        _logger.debug(f"Cart: {live.id} x{new_qty}")
        return line

    def set_quantity_delta(self, product_id: str, delta: int) -> Optional[CartLine]:
        """
        Shift a line's quantity by delta. Going above stock is ignored, going to
        zero or below drops the line. Returns the resulting line, or None if
        the line is gone or was never there.
        """
        self._ensure_open()
        line = self._lines.get(product_id)
        if line is None:
            return None

        live = self._live(line.product)
        new_qty = line.quantity + delta
        if new_qty <= 0:
            del self._lines[product_id]
            return None
        if not within_stock(new_qty, live):
            return line

        line = CartLine(product=live, quantity=new_qty)
        self._lines[product_id] = line
        return line

    def remove_item(self, product_id: str) -> None:
        self._ensure_open()
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._ensure_open()
        self._lines.clear()
