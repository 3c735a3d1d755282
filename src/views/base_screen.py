from typing import Any, Awaitable, Optional, TypeVar

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.events import ScreenResume
from textual.screen import Screen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Label,
    ListItem,
    ListView,
    Markdown,
)

from db.errors import DshError
from utils.messages import ModeSwitchedMessage, UserLoginMessage, UserLogoutMessage
from utils.pure import generate_markdown_table
from views.modal_dialog import DialogModal, QuitDialogModal

T = TypeVar("T")


def error_text(e: Exception) -> str:
    msg = str(e)
    return msg[:1].upper() + msg[1:]


class Sidebar(Container):
    init_mode = ""

    def compose(self) -> ComposeResult:
        yield Label("User Info", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Log out", id="btn-logout", variant="error")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    def on_mount(self):
        self.init_mode = self.app.current_mode

    async def render_info(self) -> None:
        state = self.app.state
        if not state.session:
            return

        table_rows = [["Role", state.role.capitalize()], ["Name", state.session.name]]
        record = state.current_manufacturer() or state.current_customer()
        if record:
            table_rows.append(["ID", record.id])
            table_rows.append(["Status", record.status])
        md_table_str = generate_markdown_table(None, table_rows, ["l", "l"])
        await self.query_one(Markdown).update(md_table_str)

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(v), name=k)
                for k, v in self.app.ROLE_MODES[state.role].items()
            ]
        )
        self.highlight_item(self.init_mode)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.name
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            DialogModal(
                "Are you sure you want to log out?",
                primary_text="Yes",
                secondary_text="No",
                tone="warning",
            )
        ):
            return

        self.post_message(UserLogoutMessage())

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.name == mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "Base Screen",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        """
        self.app.title = "Defence Supply Hub"
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

    @on(UserLoginMessage)
    @on(ScreenResume)
    async def handle_user_login(self):
        if self._show_sidebar:
            await self.query_one(Sidebar).render_info()
        self.refresh_content()

    def refresh_content(self) -> None:
        """Re-render the screen from app state; overridden by dashboards."""

    async def run_op(self, aw: Awaitable[T], success: str = "") -> Optional[T]:
        """
        Await a GlobalState operation and report the outcome as a notification.
        Returns None if the operation raised.
        """
        try:
            result = await aw
        except DshError as e:
            self.notify(error_text(e), severity="error")
            return None

        storage_error = self.app.state.last_storage_error
        if storage_error:
            self.notify(
                f"Changes kept for this session only: {storage_error}",
                severity="warning",
            )
        elif success:
            self.notify(success)
        return result

    @staticmethod
    def selected_key(table: DataTable) -> Optional[Any]:
        """Row key of the highlighted row, or None for an empty table."""
        if table.row_count == 0:
            return None
        cell_key = table.coordinate_to_cell_key(table.cursor_coordinate)
        return cell_key.row_key.value

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
