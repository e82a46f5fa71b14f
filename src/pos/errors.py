# error taxonomy shared by the register core


class RegisterError(Exception):
    """Base class for every error raised by the register core."""


class DuplicateIdentity(RegisterError):
    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} already exists.")
        self.product_id = product_id


class NotFound(RegisterError):
    def __init__(self, what: str, ident: str):
        super().__init__(f"{what} {ident} not found.")
        self.ident = ident


class InvalidProduct(RegisterError):
    pass


class OutOfStock(RegisterError):
    def __init__(self, product_id: str, name: str = ""):
        super().__init__(f"{name or product_id} is out of stock.")
        self.product_id = product_id


class StockExceeded(RegisterError):
    def __init__(self, product_id: str, stock: int):
        super().__init__(f"Max stock reached in cart ({stock} available).")
        self.product_id = product_id
        self.stock = stock


class EmptyCart(RegisterError):
    def __init__(self):
        super().__init__("Cart is empty.")


class InvalidState(RegisterError):
    pass


class PersistenceError(RegisterError):
    """
    Raised by a store when a durable read or write fails.
    """


class ExpiredWarning(UserWarning):
    """
    Issued through `warnings` when an expired product is added to the cart.
    The add itself still goes through.
    """
