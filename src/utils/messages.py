from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired whenever a line is added, changed or removed in the register cart.
    Triggers a refresh of the cart panel and the totals.
    """

    bubble = True


class CatalogChangedMessage(Message):
    """
    Fired after a product is added, updated or deleted, and after a sale
    decremented stock. Listened to by the register grid, inventory and dashboard.
    """

    bubble = True


class NewTransactionMessage(Message):
    """
    Fired when a checkout commits.
    Listened to by history and dashboard.
    """

    bubble = True

    def __init__(self, transaction_id: str) -> None:
        super().__init__()
        self.transaction_id = transaction_id


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
