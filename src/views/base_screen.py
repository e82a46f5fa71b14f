from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Footer, Header, Label, ListItem, ListView, Markdown

from pos.pricing import format_money
from utils.messages import ModeSwitchedMessage
from utils.pure import generate_markdown_table
from views.modal_dialog import QuitDialogModal


class Sidebar(Container):
    init_mode = ""

    def compose(self) -> ComposeResult:
        yield Label("RetailPulse", id="label-info-1")
        yield Markdown("", id="md-register-info")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        self.init_mode = self.app.current_mode

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(v), id="list-menu-item-" + k)
                for k, v in self.app.MODE_TITLES.items()
            ]
        )
        self.highlight_item(self.init_mode)
        await self.update_info()

    async def update_info(self) -> None:
        register = self.app.state.register
        if register is None:
            return
        rows = [
            ["Products", len(register.catalog)],
            ["Sales", len(register.log)],
            ["Revenue", format_money(register.log.total_revenue())],
        ]
        await self.query_one("#md-register-info", Markdown).update(
            generate_markdown_table(["", ""], rows, ["l", "r"])
        )

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.app.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True),
    ]

    def __init__(self):
        super().__init__()
        self.configure()

    def configure(self, header_sub_title: str = "", show_sidebar: bool = True) -> None:
        self.app.title = "RetailPulse"
        self.sub_title = header_sub_title
        for k, v in self.app.MODES.items():
            if isinstance(self, v):
                self.sub_title = self.app.MODE_TITLES.get(k, header_sub_title)
        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())

    def refresh_sidebar(self) -> None:
        if self._show_sidebar:
            self.run_worker(self.query_one(Sidebar).update_info(), exclusive=True, group="sidebar")
