from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from db.models import Transaction
from pos.errors import NotFound
from utils.logger import get_logger

_logger = get_logger(__name__)


class TransactionLog:
    """
    Append-only ledger of completed sales, most recent first.
    """

    def __init__(self, store):
        self._store = store
        self._entries: List[Transaction] = []

    async def load(self) -> List[Transaction]:
        self._entries = list(await self._store.load_transactions())
        return self.entries()

    def entries(self) -> List[Transaction]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def first(self) -> Optional[Transaction]:
        return self._entries[0] if self._entries else None

    def recent(self, n: int) -> List[Transaction]:
        return self._entries[: max(n, 0)]

    def get(self, tx_id: str) -> Transaction:
        for tx in self._entries:
            if tx.id == tx_id:
                return tx
        raise NotFound("Transaction", tx_id)

    def total_revenue(self) -> Decimal:
        return sum((tx.total for tx in self._entries), Decimal("0"))

    async def append(self, tx: Transaction) -> None:
        """Persist tx, then put it at the head of the in-memory log."""
        await self._store.append_transaction(tx)
        self._entries.insert(0, tx)
        _logger.info(f"Transaction {tx.id} logged: {tx.total} via {tx.payment_method}.")
