import uuid
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, LoadingIndicator

from db.models import Product
from insights.provider import safe_describe
from pos.catalog import validate_product
from pos.errors import InvalidProduct


class ProductFormModal(ModalScreen[Optional[Product]]):
    """
    Add / edit form for one product.
    Dismisses with the filled-in Product, or None when cancelled. Saving to
    the catalog is left to the caller.
    """

    def __init__(self, product: Optional[Product] = None) -> None:
        super().__init__()
        self._product = product

    def compose(self) -> ComposeResult:
        p = self._product
        title = f"Edit {p.name}" if p else "Add Product"
        with Vertical(id="div-product-form"):
            yield Label(title, id="label-form-title")
            with Horizontal():
                with Vertical():
                    yield Label("SKU")
                    yield Input(p.sku if p else "", id="input-sku")
                with Vertical():
                    yield Label("Name")
                    yield Input(p.name if p else "", id="input-name")
            with Horizontal():
                with Vertical():
                    yield Label("Category")
                    yield Input(p.category if p else "General", id="input-category")
                with Vertical():
                    yield Label("Expiry (YYYY-MM-DD)")
                    yield Input(
                        p.expiry_date.isoformat() if p and p.expiry_date else "",
                        placeholder="optional",
                        id="input-expiry",
                    )
            with Horizontal():
                with Vertical():
                    yield Label("Price ($)")
                    yield Input(
                        f"{p.price:.2f}" if p else "0.00",
                        id="input-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                with Vertical():
                    yield Label("Stock")
                    yield Input(
                        str(p.stock) if p else "0",
                        id="input-stock",
                        type="integer",
                        validators=[Number(minimum=0)],
                    )
            with Horizontal(id="hort-ai"):
                yield Button("AI Description", id="btn-ai-describe")
                yield LoadingIndicator(id="loading-describe")
            yield Label("", id="label-description")
            with Horizontal():
                yield Button("Cancel", id="btn-quit")
                yield Button("Save", id="btn-save", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#loading-describe").display = False
        self.query_one("#input-sku", Input).focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    def _value(self, widget_id: str) -> str:
        return self.query_one(widget_id, Input).value.strip()

    def _build(self) -> Product:
        try:
            price = Decimal(self._value("#input-price") or "0")
        except InvalidOperation:
            raise InvalidProduct("Price must be a number.")
        try:
            stock = int(self._value("#input-stock") or "0")
        except ValueError:
            raise InvalidProduct("Stock must be a whole number.")
        expiry_text = self._value("#input-expiry")
        try:
            expiry = date.fromisoformat(expiry_text) if expiry_text else None
        except ValueError:
            raise InvalidProduct("Expiry must be a date like 2025-12-31.")

        product = Product(
            id=self._product.id if self._product else str(uuid.uuid4()),
            sku=self._value("#input-sku"),
            name=self._value("#input-name"),
            price=price,
            category=self._value("#input-category") or "General",
            stock=stock,
            expiry_date=expiry,
        )
        validate_product(product)
        return product

    @on(Button.Pressed, "#btn-save")
    def handle_save(self) -> None:
        try:
            product = self._build()
        except InvalidProduct as e:
            self.notify(str(e), severity="error")
            return
        self.dismiss(product)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self) -> None:
        self.dismiss(None)

    @on(Button.Pressed, "#btn-ai-describe")
    @work(exclusive=True, group="describe")
    async def handle_describe(self) -> None:
        name = self._value("#input-name")
        category = self._value("#input-category")
        if not name or not category:
            self.notify("Enter a name and category first.", severity="warning")
            return

        button = self.query_one("#btn-ai-describe", Button)
        spinner = self.query_one("#loading-describe")
        button.disabled = True
        spinner.display = True
        try:
            text = await safe_describe(self.app.state.insights, name, category)
            self.query_one("#label-description", Label).update(text)
        finally:
            button.disabled = False
            spinner.display = False
