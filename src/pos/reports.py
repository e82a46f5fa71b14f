"""
Aggregates over the catalog and the transaction log for the dashboard and
for the insights provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from db.models import PAYMENT_METHODS, Product, Transaction
from pos.catalog import LOW_STOCK_THRESHOLD, is_expired, is_low_stock

RECENT_TRANSACTIONS = 10


@dataclass(frozen=True)
class SalesSummary:
    total_revenue: Decimal
    total_transactions: int
    low_stock_count: int
    expired_count: int


@dataclass(frozen=True)
class CatalogStats:
    total_revenue: Decimal
    low_stock: Tuple[str, ...]
    expired: Tuple[str, ...]
    recent_transaction_count: int


def _revenue(transactions: Sequence[Transaction]) -> Decimal:
    return sum((t.total for t in transactions), Decimal("0"))


def summarize(
    products: Sequence[Product],
    transactions: Sequence[Transaction],
    as_of: Optional[date] = None,
) -> SalesSummary:
    return SalesSummary(
        total_revenue=_revenue(transactions),
        total_transactions=len(transactions),
        low_stock_count=sum(1 for p in products if is_low_stock(p, LOW_STOCK_THRESHOLD)),
        expired_count=sum(1 for p in products if is_expired(p, as_of)),
    )


def stock_status(p: Product, as_of: Optional[date] = None) -> str:
    if p.stock == 0:
        return "Out of Stock"
    if is_expired(p, as_of):
        return "Expired"
    return f"Low: {p.stock}"


def attention_items(
    products: Sequence[Product], as_of: Optional[date] = None, limit: int = 5
) -> List[Tuple[Product, str]]:
    """Expired products first, then low stock ones, tagged for display."""
    expired = [p for p in products if is_expired(p, as_of)]
    low = [
        p for p in products if is_low_stock(p, LOW_STOCK_THRESHOLD) and p not in expired
    ]
    return [(p, stock_status(p, as_of)) for p in (expired + low)[:limit]]


def catalog_stats(
    products: Sequence[Product],
    transactions: Sequence[Transaction],
    as_of: Optional[date] = None,
) -> CatalogStats:
    return CatalogStats(
        total_revenue=_revenue(transactions),
        low_stock=tuple(p.name for p in products if is_low_stock(p, LOW_STOCK_THRESHOLD)),
        expired=tuple(p.name for p in products if is_expired(p, as_of)),
        recent_transaction_count=len(transactions[:RECENT_TRANSACTIONS]),
    )


def payment_breakdown(transactions: Sequence[Transaction]) -> Dict[str, Tuple[int, Decimal]]:
    """Return {method: (count, revenue)} for every known payment method."""
    result: Dict[str, Tuple[int, Decimal]] = {m: (0, Decimal("0")) for m in PAYMENT_METHODS}
    for t in transactions:
        count, revenue = result[t.payment_method]
        result[t.payment_method] = (count + 1, revenue + t.total)
    return result
