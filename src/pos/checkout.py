"""
Checkout protocol: turns a cart into a durable Transaction and a stock decrement.

    OPEN --begin()--> AWAITING_PAYMENT --commit()--> COMMITTED
                             |
                             +------cancel()-----> CANCELLED

The cart is frozen for the whole AWAITING_PAYMENT phase. While commit() is
awaiting the store, cancel() and a second commit() raise InvalidState. The
transaction log write comes first; when it fails nothing else happens and
the checkout stays in AWAITING_PAYMENT so the caller can retry or cancel.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from db.models import PAYMENT_METHODS, PaymentMethod, Transaction
from pos import pricing
from pos.cart import Cart
from pos.catalog import Catalog
from pos.errors import EmptyCart, InvalidState, PersistenceError
from pos.txlog import TransactionLog
from utils.logger import get_logger

_logger = get_logger(__name__)


class CheckoutState(enum.Enum):
    OPEN = "open"
    AWAITING_PAYMENT = "awaiting_payment"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class Checkout:
    def __init__(
        self,
        cart: Cart,
        catalog: Catalog,
        log: TransactionLog,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.cart = cart
        self.catalog = catalog
        self.log = log
        self._clock = clock
        self._id_factory = id_factory
        self.state = CheckoutState.OPEN
        self.transaction: Optional[Transaction] = None
        self._committing = False

    @property
    def is_terminal(self) -> bool:
        return self.state in (CheckoutState.COMMITTED, CheckoutState.CANCELLED)

    @property
    def committing(self) -> bool:
        return self._committing

    def _require(self, state: CheckoutState, action: str) -> None:
        if self._committing:
            raise InvalidState(f"Cannot {action} while a payment is being recorded.")
        if self.state is not state:
            raise InvalidState(f"Cannot {action} while checkout is {self.state.value}.")

    def _move(self, state: CheckoutState) -> None:
        _logger.debug(f"Checkout {self.state.value} -> {state.value}")
        self.state = state

    def begin(self) -> None:
        self._require(CheckoutState.OPEN, "begin checkout")
        if self.cart.is_empty:
            raise EmptyCart()
        self.cart.freeze()
        self._move(CheckoutState.AWAITING_PAYMENT)

    def cancel(self) -> None:
        self._require(CheckoutState.AWAITING_PAYMENT, "cancel")
        self.cart.thaw()
        self._move(CheckoutState.CANCELLED)

    async def commit(self, payment_method: PaymentMethod) -> Transaction:
        """
        Record the sale and apply it to inventory. Returns the new Transaction.

        Raises InvalidState outside AWAITING_PAYMENT or while another commit is
        in flight, ValueError for an unknown payment method and
        PersistenceError when the log write fails.
        """
        self._require(CheckoutState.AWAITING_PAYMENT, "commit")
        if payment_method not in PAYMENT_METHODS:
            raise ValueError(f"Unknown payment method: {payment_method!r}")

        lines = tuple(self.cart.lines())
        totals = pricing.price_lines(lines)
        tx = Transaction(
            id=self._id_factory(),
            timestamp=self._clock(),
            items=lines,
            subtotal=totals.subtotal,
            tax=totals.tax,
            total=totals.total,
            payment_method=payment_method,
        )

        # no cancel or second commit until this attempt settles
        self._committing = True
        try:
            # gate: nothing below runs unless the sale is durable
            await self.log.append(tx)

            try:
                await self.catalog.decrement_stock(
                    (line.product_id, line.quantity) for line in lines
                )
            except PersistenceError:
                _logger.exception(
                    f"Stock for transaction {tx.id} not saved; catalog will be resynced on next save."
                )

            self.cart.thaw()
            self.cart.clear()
            self.transaction = tx
            self._move(CheckoutState.COMMITTED)
        finally:
            self._committing = False
        return tx
