from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, MarkdownViewer

from db.models import Product
from pos.catalog import LOW_STOCK_THRESHOLD, is_expired, is_low_stock
from pos.errors import RegisterError
from pos.pricing import format_money
from utils.messages import CatalogChangedMessage, ModeSwitchedMessage
from utils.pure import product_markdown
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal
from views.modal_product_form import ProductFormModal


class InventoryScreen(BaseScreen):
    """
    Manage the product catalog: stock levels, prices and expiry dates.
    """

    BINDINGS = [
        Binding("ctrl+n", "add_product", "Add Product", show=True),
        Binding("ctrl+e", "edit_product", "Edit", show=True),
        Binding("delete", "delete_product", "Delete", show=True),
    ]

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Input(id="input-search", placeholder="Filter by name or SKU...")
            yield DataTable(id="table-inventory")
            yield MarkdownViewer(id="md-prod", show_table_of_contents=False)
            with Horizontal(id="hort-controls"):
                yield Button("Add Product", id="btn-add", variant="success")
                yield Button("Edit", id="btn-edit")
                yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("SKU", "Name", "Category", "Price", "Stock", "Expiry", "Status")
        self.handle_reload()

    def _selected(self) -> Optional[Product]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        key = table.coordinate_to_cell_key(table.cursor_coordinate).row_key.value
        return self.app.state.register.catalog.find(key)

    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @on(CatalogChangedMessage)
    @on(Input.Changed, "#input-search")
    def handle_reload(self) -> None:
        catalog = self.app.state.register.catalog
        term = self.query_one("#input-search", Input).value

        table = self.query_one(DataTable)
        table.clear()
        for p in catalog.search(term):
            status = []
            if is_expired(p):
                status.append("Expired")
            if p.stock == 0:
                status.append("Out of Stock")
            elif is_low_stock(p, LOW_STOCK_THRESHOLD):
                status.append("Low Stock")
            table.add_row(
                p.sku,
                p.name,
                p.category,
                format_money(p.price),
                str(p.stock),
                p.expiry_date.isoformat() if p.expiry_date else "-",
                ", ".join(status) or "OK",
                key=p.id,
            )
        self._render_selected()
        self.refresh_sidebar()

    @on(DataTable.RowHighlighted)
    def _render_selected(self) -> None:
        prod = self._selected()
        md = product_markdown(prod) if prod else "### No product selected."
        self.query_one("#md-prod", MarkdownViewer).document.update(md)

    @on(Button.Pressed, "#btn-add")
    def handle_add(self) -> None:
        self.action_add_product()

    @on(Button.Pressed, "#btn-edit")
    def handle_edit(self) -> None:
        self.action_edit_product()

    @on(Button.Pressed, "#btn-delete")
    def handle_delete(self) -> None:
        self.action_delete_product()

    @work(exclusive=True)
    async def action_add_product(self) -> None:
        product = await self.app.push_screen_wait(ProductFormModal())
        if product is None:
            return
        try:
            await self.app.state.register.catalog.add_product(product)
        except RegisterError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"{product.name} added.")
        self.post_message(CatalogChangedMessage())

    @work(exclusive=True)
    async def action_edit_product(self) -> None:
        current = self._selected()
        if current is None:
            self.notify("Select a product first.", severity="warning")
            return
        product = await self.app.push_screen_wait(ProductFormModal(current))
        if product is None or product == current:
            return
        try:
            await self.app.state.register.catalog.update_product(product)
        except RegisterError as e:
            self.notify(str(e), severity="error")
            return
        self.notify("Product updated successfully.")
        self.post_message(CatalogChangedMessage())

    @work(exclusive=True)
    async def action_delete_product(self) -> None:
        current = self._selected()
        if current is None:
            self.notify("Select a product first.", severity="warning")
            return
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Are you sure you want to delete {current.name}?",
                primary_text="Delete",
                secondary_text="Cancel",
                tone="error",
            )
        ):
            return
        try:
            await self.app.state.register.catalog.delete_product(current.id)
        except RegisterError as e:
            self.notify(str(e), severity="error")
            return
        self.notify(f"{current.name} deleted.")
        self.post_message(CatalogChangedMessage())
