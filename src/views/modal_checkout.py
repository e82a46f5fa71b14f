from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, MarkdownViewer

from db.models import PAYMENT_METHODS, Transaction
from pos.errors import RegisterError
from pos.pricing import format_money
from utils.pure import generate_markdown_table


class CheckoutModal(ModalScreen[Optional[Transaction]]):
    """
    Payment step of checkout. The caller has already begun checkout, so the
    cart is frozen while this modal is up.
    Dismisses with the committed Transaction, or None if the cashier backed out
    (which cancels the checkout and unlocks the cart).
    """

    BINDINGS = [("escape", "go_back", "Back")]

    _busy = False  # set while a commit worker runs

    def compose(self) -> ComposeResult:
        with Vertical(id="div-checkout"):
            yield MarkdownViewer("", show_table_of_contents=False)
            yield Label("Select Payment Method")
            with Horizontal(id="hort-payment"):
                for method in PAYMENT_METHODS:
                    yield Button(
                        method.capitalize(),
                        id=f"btn-pay-{method}",
                        classes="pay-button",
                        variant="success",
                    )
            with Horizontal():
                yield Button("Go Back", id="btn-quit")

    async def on_mount(self):
        register = self.app.state.register
        lines = register.cart.lines()
        totals = register.totals()
        rows = [
            [
                line.product.name,
                format_money(line.product.price),
                line.quantity,
                format_money(line.line_total),
            ]
            for line in lines
        ]
        md = "### Order Summary\n\n" + generate_markdown_table(
            ["Product", "Unit Price", "Quantity", "Total"], rows, ["l", "r", "r", "r"]
        )
        md += (
            f"\n\n**Subtotal:** {format_money(totals.subtotal)}  \n"
            f"**Tax (8%):** {format_money(totals.tax)}  \n"
            f"**Total Due:** {format_money(totals.total)}"
        )
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one(f"#btn-pay-{PAYMENT_METHODS[0]}").focus()

    def _set_busy(self, busy: bool) -> None:
        self._busy = busy
        for button in self.query(Button):
            button.disabled = busy

    @on(Button.Pressed, ".pay-button")
    @work(exclusive=True, group="commit")
    async def handle_pay(self, event: Button.Pressed) -> None:
        method = event.button.id.removeprefix("btn-pay-")
        self._set_busy(True)
        try:
            tx = await self.app.state.register.commit(method)
        except RegisterError as e:
            self._set_busy(False)
            self.notify(f"Checkout failed: {e}", severity="error")
            return
        self.notify(f"Transaction complete. Total {format_money(tx.total)} paid by {method}.")
        self.dismiss(tx)

    def action_go_back(self) -> None:
        self.handle_quit()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self) -> None:
        if self._busy:
            self.notify("Payment is being recorded, please wait.", severity="warning")
            return
        register = self.app.state.register
        if register.checkout is not None and not register.checkout.is_terminal:
            register.cancel_checkout()
        self.dismiss(None)
