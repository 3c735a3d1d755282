import os

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from db.seed import seed_if_empty
from utils.logger import get_logger
from utils.messages import ModeSwitchedMessage, QuitRequestedMessage, UserLogoutMessage
from utils.state import GlobalState
from views.scr_admin import AdminScreen
from views.scr_cust_rfqs import CustomerRfqScreen
from views.scr_login import LoginScreen
from views.scr_mfr_products import ManufacturerProductsScreen
from views.scr_mfr_profile import ManufacturerProfileScreen
from views.scr_mfr_rfqs import ManufacturerRfqScreen

_logger = get_logger(__name__)

SEED_DEMO = os.getenv("DSH_SEED_DEMO", "").lower() in ("1", "true", "yes")


class DshApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "mfr_profile": ManufacturerProfileScreen,
        "mfr_products": ManufacturerProductsScreen,
        "mfr_rfqs": ManufacturerRfqScreen,
        "cust_rfqs": CustomerRfqScreen,
        "admin": AdminScreen,
    }

    # first entry of each role is its landing mode
    ROLE_MODES = {
        "manufacturer": {
            "mfr_profile": "Company Profile",
            "mfr_products": "Products",
            "mfr_rfqs": "Open RFQs",
        },
        "customer": {"cust_rfqs": "My RFQs"},
        "admin": {"admin": "Administration"},
    }
    MODE_TITLES = {k: v for modes in ROLE_MODES.values() for k, v in modes.items()}

    CSS_PATH = [
        "views/styles/index.tcss",
        "views/styles/login.tcss",
        "views/styles/dashboard.tcss",
    ]

    state: GlobalState

    def __init__(self):
        super().__init__()
        self.state = GlobalState()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow(startup=True)

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        await self.state.logout()
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.exit()

    @work
    async def main_flow(self, startup: bool = False):
        if startup:
            if SEED_DEMO and await seed_if_empty():
                self.notify("Demo records loaded.")
            await self.state.load()

        # a persisted session survives restarts
        if self.state.session is None:
            await self.push_screen_wait(LoginScreen())

        landing = next(iter(self.ROLE_MODES[self.state.role]))
        _logger.debug(f"Switching to {landing} for role {self.state.role}")
        self.post_message(ModeSwitchedMessage(self.current_mode, landing))
        await self.switch_mode(landing)


def run() -> None:
    DshApp().run()


if __name__ == "__main__":
    run()
