from __future__ import annotations

from typing import Iterable, Optional

from db.models import PaymentMethod, Transaction
from pos.cart import Cart
from pos.catalog import Catalog
from pos.checkout import Checkout, CheckoutState
from pos.errors import InvalidState, PersistenceError
from pos.pricing import Totals, price_lines
from pos.txlog import TransactionLog
from utils.logger import get_logger

_logger = get_logger(__name__)


class Register:
    """
    One register session: catalog, transaction log, the current cart and the
    checkout in flight (if any). The store is injected, never looked up.
    """

    def __init__(self, store, **checkout_kwargs):
        self.store = store
        self.catalog = Catalog(store)
        self.log = TransactionLog(store)
        self.cart = Cart(self.catalog)
        self.checkout: Optional[Checkout] = None
        self._checkout_kwargs = checkout_kwargs

    @classmethod
    async def open(cls, store, seed: Optional[Iterable] = None, **checkout_kwargs) -> Register:
        register = cls(store, **checkout_kwargs)
        await register.catalog.load(seed=seed)
        await register.log.load()
        _logger.info(
            f"Register opened: {len(register.catalog)} products, {len(register.log)} transactions."
        )
        return register

    @property
    def checkout_state(self) -> CheckoutState:
        if self.checkout is None:
            return CheckoutState.OPEN
        return self.checkout.state

    def totals(self) -> Totals:
        return price_lines(self.cart.lines())

    def begin_checkout(self) -> Checkout:
        if self.checkout is not None and not self.checkout.is_terminal:
            self.checkout.begin()  # raises InvalidState if already awaiting payment
            return self.checkout
        checkout = Checkout(self.cart, self.catalog, self.log, **self._checkout_kwargs)
        checkout.begin()
        self.checkout = checkout
        return checkout

    async def commit(self, payment_method: PaymentMethod) -> Transaction:
        if self.checkout is None or self.checkout.is_terminal:
            raise InvalidState("No checkout awaiting payment.")
        return await self.checkout.commit(payment_method)

    def cancel_checkout(self) -> None:
        if self.checkout is None:
            raise InvalidState("No checkout to cancel.")
        self.checkout.cancel()

    async def close(self) -> bool:
        """
        Write out stock left unsaved by a failed save. Returns False if the
        catalog is still out of sync with the store.
        """
        if not self.catalog.needs_sync:
            return True
        try:
            await self.catalog.sync()
        except PersistenceError:
            _logger.exception("Catalog still not saved; stock changes since the last save are lost.")
            return False
        _logger.info("Pending stock changes saved.")
        return True
