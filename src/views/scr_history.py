from math import ceil
from typing import List

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.reactive import reactive
from textual.widgets import Button, DataTable, Label, MarkdownViewer

from db.models import Transaction
from pos import reports
from pos.errors import NotFound
from pos.pricing import format_money
from utils.messages import ModeSwitchedMessage, NewTransactionMessage
from utils.pure import transaction_markdown
from views.base_screen import BaseScreen

PAGE_SIZE = 10


class HistoryScreen(BaseScreen):
    """
    Completed sales, most recent first, 10 per page.

    Layout:
    - Markdown receipt view of the highlighted transaction at the top.
    - Transactions table below with Prev/Next.
    """

    BINDINGS = [
        Binding("left", "prev_page", "Prev Page", show=True),
        Binding("right", "next_page", "Next Page", show=True),
    ]

    page_idx = reactive(1, init=False)
    page_cnt = reactive(1)

    def __init__(self) -> None:
        super().__init__()
        self._page: List[Transaction] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-tx-detail", show_table_of_contents=False)
            yield DataTable(id="table-transactions")
        with Horizontal(id="hort-table-control"):
            yield Button("<", id="btn-prev")
            yield Label(" 1 / 1 ", id="label-page")
            yield Button(">", id="btn-next")
            yield Label("", id="label-breakdown")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Date", "Transaction", "Items", "Method", "Total")
        self.handle_refresh()

    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(NewTransactionMessage)
    def handle_refresh(self) -> None:
        if self.page_idx != 1:
            self.page_idx = 1  # watcher reloads
        else:
            self._load_page(1)

    def watch_page_idx(self, old: int, new: int) -> None:
        self._load_page(new)

    def action_prev_page(self) -> None:
        if self.page_idx > 1:
            self.page_idx -= 1

    def action_next_page(self) -> None:
        if self.page_idx < self.page_cnt:
            self.page_idx += 1

    @on(Button.Pressed, "#btn-prev")
    def handle_prev(self) -> None:
        self.action_prev_page()

    @on(Button.Pressed, "#btn-next")
    def handle_next(self) -> None:
        self.action_next_page()

    def _load_page(self, page: int) -> None:
        log = self.app.state.register.log
        entries = log.entries()
        self.page_cnt = max(ceil(len(entries) / PAGE_SIZE), 1)
        start = (page - 1) * PAGE_SIZE
        self._page = entries[start : start + PAGE_SIZE]

        table = self.query_one(DataTable)
        table.clear()
        for t in self._page:
            table.add_row(
                f"{t.timestamp.astimezone():%Y-%m-%d %H:%M}",
                t.id[:8],
                str(t.item_count),
                t.payment_method.capitalize(),
                format_money(t.total),
                key=t.id,
            )

        self.query_one("#label-page", Label).update(f" {page} / {self.page_cnt} ")
        self.query_one("#btn-prev", Button).disabled = page <= 1
        self.query_one("#btn-next", Button).disabled = page >= self.page_cnt

        breakdown = reports.payment_breakdown(entries)
        self.query_one("#label-breakdown", Label).update(
            "  ".join(
                f"{m.capitalize()}: {n} ({format_money(rev)})"
                for m, (n, rev) in breakdown.items()
            )
        )

        if self._page:
            table.move_cursor(row=0)
            self._render_detail(self._page[0].id)
        else:
            self._render_detail(None)

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        self._render_detail(event.row_key.value)

    @work(exclusive=True)
    async def _render_detail(self, tx_id: str | None) -> None:
        viewer = self.query_one("#md-tx-detail", MarkdownViewer)
        if tx_id is None:
            await viewer.document.update("### No transactions yet.")
            return
        try:
            tx = self.app.state.register.log.get(tx_id)
        except NotFound:
            await viewer.document.update("### Select a transaction to view its details.")
            return
        await viewer.document.update(transaction_markdown(tx))
