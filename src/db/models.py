# provide dataclass models

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional, Tuple

PaymentMethod = Literal["cash", "card", "digital"]
PAYMENT_METHODS: Tuple[str, ...] = ("cash", "card", "digital")


@dataclass(frozen=True)
class Product:
    id: str
    sku: str
    name: str
    price: Decimal
    category: str
    stock: int
    expiry_date: Optional[date] = None

    def with_stock(self, stock: int) -> Product:
        return dataclasses.replace(self, stock=stock)


@dataclass(frozen=True)
class CartLine:
    product: Product  # snapshot taken when the line was last touched
    quantity: int

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


@dataclass(frozen=True)
class Transaction:
    id: str
    timestamp: datetime
    items: Tuple[CartLine, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    payment_method: PaymentMethod

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)
