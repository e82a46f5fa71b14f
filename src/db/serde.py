# JSON snapshot codec for catalog and transaction log records
from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from db.models import PAYMENT_METHODS, CartLine, Product, Transaction


def _opt_date(val: Optional[str]) -> Optional[date]:
    if not val:
        return None
    return date.fromisoformat(val)


def product_to_dict(p: Product) -> Dict[str, Any]:
    return {
        "id": p.id,
        "sku": p.sku,
        "name": p.name,
        "price": str(p.price),
        "category": p.category,
        "stock": p.stock,
        "expiry_date": p.expiry_date.isoformat() if p.expiry_date else None,
    }


def product_from_dict(d: Dict[str, Any]) -> Product:
    return Product(
        id=str(d["id"]),
        sku=d["sku"],
        name=d["name"],
        price=Decimal(str(d["price"])),
        category=d["category"],
        stock=int(d["stock"]),
        expiry_date=_opt_date(d.get("expiry_date")),
    )


def line_to_dict(line: CartLine) -> Dict[str, Any]:
    # flat: product fields plus quantity
    return {**product_to_dict(line.product), "quantity": line.quantity}


def line_from_dict(d: Dict[str, Any]) -> CartLine:
    return CartLine(product=product_from_dict(d), quantity=int(d["quantity"]))


def transaction_to_dict(tx: Transaction) -> Dict[str, Any]:
    return {
        "id": tx.id,
        "timestamp": tx.timestamp.isoformat(),
        "items": [line_to_dict(line) for line in tx.items],
        "subtotal": str(tx.subtotal),
        "tax": str(tx.tax),
        "total": str(tx.total),
        "payment_method": tx.payment_method,
    }


def transaction_from_dict(d: Dict[str, Any]) -> Transaction:
    method = d["payment_method"]
    if method not in PAYMENT_METHODS:
        raise ValueError(f"Unknown payment method: {method!r}")
    return Transaction(
        id=str(d["id"]),
        timestamp=datetime.fromisoformat(d["timestamp"]),
        items=tuple(line_from_dict(i) for i in d["items"]),
        subtotal=Decimal(d["subtotal"]),
        tax=Decimal(d["tax"]),
        total=Decimal(d["total"]),
        payment_method=method,
    )


def dump_catalog(products: List[Product]) -> str:
    return json.dumps([product_to_dict(p) for p in products], indent=2)


def load_catalog(text: str) -> List[Product]:
    return [product_from_dict(d) for d in json.loads(text)]


def dump_transactions(transactions: List[Transaction]) -> str:
    return json.dumps([transaction_to_dict(t) for t in transactions], indent=2)


def load_transactions(text: str) -> List[Transaction]:
    return [transaction_from_dict(d) for d in json.loads(text)]
