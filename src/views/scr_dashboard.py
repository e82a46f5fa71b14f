from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, LoadingIndicator, Markdown, MarkdownViewer

from insights.provider import safe_summarize
from pos import reports
from pos.pricing import format_money
from utils.messages import ModeSwitchedMessage, NewTransactionMessage
from utils.pure import generate_markdown_table
from views.base_screen import BaseScreen


class DashboardScreen(BaseScreen):
    """
    Store overview: headline numbers, items needing attention, recent sales,
    and on-demand AI insights.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-overview", show_table_of_contents=False)
            with Horizontal(id="hort-insights"):
                yield Button("Generate Insights", id="btn-insights", variant="primary")
                yield LoadingIndicator(id="loading-insights")
            yield Markdown("_Press Generate Insights for AI advice._", id="md-insights")

    def on_mount(self) -> None:
        self.query_one("#loading-insights").display = False
        self.handle_reload()

    @on(NewTransactionMessage)
    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        register = self.app.state.register
        products = register.catalog.list_products()
        transactions = register.log.entries()

        summary = reports.summarize(products, transactions)
        attention = reports.attention_items(products)
        recent = register.log.recent(5)

        md = (
            "### Overview\n\n"
            f"- Total Revenue: {format_money(summary.total_revenue)}\n"
            f"- Transactions: {summary.total_transactions}\n"
            f"- Low Stock Items: {summary.low_stock_count}\n"
            f"- Expired Items: {summary.expired_count}\n\n"
            "#### Inventory Alerts\n\n"
        )
        if attention:
            md += generate_markdown_table(
                ["Product", "SKU", "Status"],
                [[p.name, p.sku, status] for p, status in attention],
                ["l", "l", "r"],
            )
        else:
            md += "All inventory is healthy."

        md += "\n\n#### Recent Transactions\n\n"
        if recent:
            md += generate_markdown_table(
                ["Time", "Items", "Method", "Total"],
                [
                    [
                        f"{t.timestamp.astimezone():%Y-%m-%d %H:%M}",
                        t.item_count,
                        t.payment_method,
                        format_money(t.total),
                    ]
                    for t in recent
                ],
                ["l", "r", "c", "r"],
            )
        else:
            md += "No sales yet."

        await self.query_one("#md-overview", MarkdownViewer).document.update(md)
        self.refresh_sidebar()

    @on(Button.Pressed, "#btn-insights")
    @work(exclusive=True, group="insights")
    async def handle_insights(self) -> None:
        state = self.app.state
        register = state.register
        button = self.query_one("#btn-insights", Button)
        spinner = self.query_one("#loading-insights")

        button.disabled = True
        spinner.display = True
        try:
            stats = reports.catalog_stats(
                register.catalog.list_products(), register.log.entries()
            )
            text = await safe_summarize(
                state.insights, stats, register.log.recent(reports.RECENT_TRANSACTIONS)
            )
            await self.query_one("#md-insights", Markdown).update(text)
        finally:
            button.disabled = False
            spinner.display = False
