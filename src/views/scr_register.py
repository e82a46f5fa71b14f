import warnings
from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label, Rule, Select

from db.models import Product
from pos.catalog import ALL_CATEGORIES, REGISTER_LOW_STOCK_THRESHOLD, is_expired, is_low_stock
from pos.errors import ExpiredWarning, RegisterError
from pos.pricing import format_money
from utils.messages import CartChangedMessage, ModeSwitchedMessage, NewTransactionMessage
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import DialogModal


def _grid_flags(p: Product) -> str:
    flags = []
    if is_expired(p):
        flags.append("EXP")
    if p.stock == 0:
        flags.append("OUT")
    elif is_low_stock(p, REGISTER_LOW_STOCK_THRESHOLD):
        flags.append("LOW")
    return " ".join(flags)


class RegisterScreen(BaseScreen):
    """
    Product grid on the left, cart and totals on the right.
    Enter on a product adds one unit; +/- and Remove act on the highlighted cart line.
    """

    BINDINGS = [
        Binding("enter", "noop", "Add to Cart", show=True, key_display="⏎"),
        Binding("ctrl+k", "checkout", "Checkout", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-register"):
            with Vertical(id="vert-products"):
                with Horizontal(id="hort-filter"):
                    yield Input(
                        id="input-search", placeholder="Search product by name or SKU..."
                    )
                    yield Select(
                        [(ALL_CATEGORIES, ALL_CATEGORIES)],
                        value=ALL_CATEGORIES,
                        allow_blank=False,
                        id="select-category",
                    )
                yield DataTable(id="table-products")
            with Vertical(id="vert-cart"):
                yield Label("Current Order", id="label-cart-title")
                yield DataTable(id="table-cart")
                with Horizontal(id="hort-line-actions"):
                    yield Button("-", id="btn-qty-sub")
                    yield Button("+", id="btn-qty-add")
                    yield Button("Remove", id="btn-remove", variant="warning")
                    yield Button("Clear", id="btn-clear-cart", variant="error")
                yield Rule(line_style="dashed")
                yield Label("", id="label-totals")
                yield Button("Checkout", id="btn-checkout", variant="primary")

    def on_mount(self) -> None:
        products = self.query_one("#table-products", DataTable)
        products.cursor_type = "row"
        products.zebra_stripes = True
        products.add_columns("SKU", "Name", "Category", "Price", "Stock", "")

        cart = self.query_one("#table-cart", DataTable)
        cart.cursor_type = "row"
        cart.add_columns("Item", "Qty", "Total")

        self.query_one("#input-search", Input).focus()
        self.handle_reload()

    # ---------------------------
    # Product grid
    # ---------------------------

    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    def handle_reload(self) -> None:
        register = self.app.state.register
        select = self.query_one("#select-category", Select)
        current = select.value
        categories = [ALL_CATEGORIES, *register.catalog.categories()]
        select.set_options([(c, c) for c in categories])
        select.value = current if current in categories else ALL_CATEGORIES
        self.render_products()
        self.render_cart()

    @on(Input.Changed, "#input-search")
    @on(Select.Changed, "#select-category")
    def render_products(self) -> None:
        register = self.app.state.register
        term = self.query_one("#input-search", Input).value
        category = self.query_one("#select-category", Select).value

        table = self.query_one("#table-products", DataTable)
        table.clear()
        for p in register.catalog.search(term, category):
            table.add_row(
                p.sku,
                p.name,
                p.category,
                format_money(p.price),
                "0 Left" if p.stock == 0 else f"{p.stock} Left",
                _grid_flags(p),
                key=p.id,
            )

    @on(DataTable.RowSelected, "#table-products")
    def handle_add_item(self, event: DataTable.RowSelected) -> None:
        register = self.app.state.register
        product = register.catalog.find(event.row_key.value)
        if product is None:
            return

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", ExpiredWarning)
            try:
                register.cart.add_item(product)
            except RegisterError as e:
                self.notify(str(e), severity="error")
                return
        for w in caught:
            self.notify(str(w.message), severity="warning")
        self.post_message(CartChangedMessage())

    # ---------------------------
    # Cart
    # ---------------------------

    def _highlighted_line(self) -> Optional[str]:
        table = self.query_one("#table-cart", DataTable)
        if table.row_count == 0:
            return None
        return table.coordinate_to_cell_key(table.cursor_coordinate).row_key.value

    @on(CartChangedMessage)
    def render_cart(self) -> None:
        register = self.app.state.register
        table = self.query_one("#table-cart", DataTable)
        keep = self._highlighted_line()
        table.clear()
        for line in register.cart.lines():
            table.add_row(
                line.product.name,
                str(line.quantity),
                format_money(line.line_total),
                key=line.product_id,
            )
        if keep and keep in register.cart:
            table.move_cursor(row=table.get_row_index(keep))

        totals = register.totals()
        self.query_one("#label-totals", Label).update(
            f"Subtotal: {format_money(totals.subtotal)}\n"
            f"Tax (8%): {format_money(totals.tax)}\n"
            f"Total:    {format_money(totals.total)}"
        )
        self.query_one("#btn-checkout", Button).disabled = register.cart.is_empty

    def _shift_quantity(self, delta: int) -> None:
        product_id = self._highlighted_line()
        if product_id is None:
            return
        try:
            self.app.state.register.cart.set_quantity_delta(product_id, delta)
        except RegisterError as e:
            self.notify(str(e), severity="error")
            return
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-qty-add")
    def handle_qty_add(self) -> None:
        self._shift_quantity(+1)

    @on(Button.Pressed, "#btn-qty-sub")
    def handle_qty_sub(self) -> None:
        self._shift_quantity(-1)

    @on(Button.Pressed, "#btn-remove")
    def handle_remove(self) -> None:
        product_id = self._highlighted_line()
        if product_id is None:
            return
        try:
            self.app.state.register.cart.remove_item(product_id)
        except RegisterError as e:
            self.notify(str(e), severity="error")
            return
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        register = self.app.state.register
        if register.cart.is_empty:
            self.notify("Cart is empty.", severity="warning")
            return

        if await self.app.push_screen_wait(
            DialogModal(
                "Do you really want to remove all items from the order?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        ):
            register.cart.clear()
            self.post_message(CartChangedMessage())

    # ---------------------------
    # Checkout
    # ---------------------------

    @on(Button.Pressed, "#btn-checkout")
    def handle_checkout_pressed(self) -> None:
        self.action_checkout()

    @work()
    async def action_checkout(self) -> None:
        register = self.app.state.register
        try:
            register.begin_checkout()
        except RegisterError as e:
            self.notify(str(e), severity="warning")
            return

        tx = await self.app.push_screen_wait(CheckoutModal())
        self.render_products()
        self.post_message(CartChangedMessage())
        if tx is not None:
            self.app.post_message(NewTransactionMessage(tx.id))
            self.refresh_sidebar()

    def action_noop(self) -> None:
        pass
