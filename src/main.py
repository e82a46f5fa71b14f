import argparse
import asyncio
import dataclasses
import sys
from decimal import InvalidOperation
from pathlib import Path

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from db import serde
from db.store import SEED_PRODUCTS, SqliteStore
from pos.errors import RegisterError
from pos.register import Register
from utils.config import Settings, load_settings
from utils.logger import get_logger, set_debug
from utils.messages import ModeSwitchedMessage, QuitRequestedMessage
from utils.state import GlobalState
from views.scr_dashboard import DashboardScreen
from views.scr_history import HistoryScreen
from views.scr_inventory import InventoryScreen
from views.scr_register import RegisterScreen

_logger = get_logger(__name__)


class RetailPulseApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "dashboard": DashboardScreen,
        "register": RegisterScreen,
        "inventory": InventoryScreen,
        "history": HistoryScreen,
    }

    MODE_TITLES = {
        "dashboard": "Dashboard",
        "register": "Register",
        "inventory": "Inventory",
        "history": "Sales History",
    }

    CSS_PATH = "styles/app.tcss"

    state: GlobalState

    def __init__(self, settings: Settings):
        super().__init__()
        self.state = GlobalState(settings=settings)

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(QuitRequestedMessage)
    async def handle_quit(self):
        register = self.state.register
        if register is not None and not await register.close():
            self.notify("Stock changes could not be saved.", severity="error")
        self.exit()

    @work
    async def main_flow(self):
        try:
            await self.state.open()
        except RegisterError as e:
            _logger.error(f"Could not open register: {e}")
            self.exit(return_code=1, message=str(e))
            return
        self.post_message(ModeSwitchedMessage(self.current_mode, "dashboard"))
        await self.switch_mode("dashboard")


async def export_catalog(settings: Settings, path: str) -> int:
    register = await Register.open(SqliteStore(settings.db_path), seed=SEED_PRODUCTS)
    products = register.catalog.list_products()
    Path(path).write_text(serde.dump_catalog(products), encoding="utf-8")
    return len(products)


async def import_catalog(settings: Settings, path: str) -> int:
    """Add new products and overwrite existing ones (matched by id)."""
    products = serde.load_catalog(Path(path).read_text(encoding="utf-8"))
    register = await Register.open(SqliteStore(settings.db_path), seed=SEED_PRODUCTS)
    for p in products:
        if register.catalog.find(p.id):
            await register.catalog.update_product(p)
        else:
            await register.catalog.add_product(p)
    return len(products)


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description="RetailPulse point-of-sale register")
    parser.add_argument("--db", help="Path to the SQLite database file")
    parser.add_argument("--env-file", help="Path to a .env file", default=None)
    parser.add_argument("--debug", help="Enable debug logging", action="store_true")
    parser.add_argument(
        "--export-catalog", metavar="PATH", help="Write the catalog as JSON and exit"
    )
    parser.add_argument(
        "--import-catalog", metavar="PATH", help="Upsert products from a JSON file and exit"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_arguments(argv)
    settings = load_settings(args.env_file)
    if args.db:
        settings = dataclasses.replace(settings, db_path=args.db)
    if args.debug:
        settings = dataclasses.replace(settings, debug=True)
    set_debug(settings.debug)

    try:
        if args.export_catalog:
            count = asyncio.run(export_catalog(settings, args.export_catalog))
            _logger.info(f"Exported {count} products to {args.export_catalog}")
            return 0
        if args.import_catalog:
            count = asyncio.run(import_catalog(settings, args.import_catalog))
            _logger.info(f"Imported {count} products from {args.import_catalog}")
            return 0
    except (RegisterError, OSError, KeyError, ValueError, InvalidOperation) as e:
        _logger.error(f"Catalog transfer failed: {e}")
        return 1

    app = RetailPulseApp(settings)
    app.run()
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
