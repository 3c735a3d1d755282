from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.events import Key
from textual.widgets import Button, Input, Label, Select, TabbedContent, TabPane

from db.errors import DshError, IdentityNotFoundError
from db.models import MEMBERSHIPS
from utils.messages import UserLoginMessage
from views.base_screen import BaseScreen, error_text
from views.modal_dialog import QuitDialogModal, SimpleDialogModal

ROLE_OPTIONS = [
    ("Manufacturer", "manufacturer"),
    ("Customer", "customer"),
    ("Admin", "admin"),
]

# registration form inputs: (field, label, placeholder)
APPLY_FIELDS = [
    ("company", "Company *", "Nordic Defence Components"),
    ("country", "Country *", "Finland"),
    ("email", "Email *", "sales@example.com"),
    ("registrationNumber", "Registration Number", "FI-1234567"),
    ("contact", "Contact Person", "Jane Doe"),
    ("phone", "Phone", "+358 40 000 0000"),
    ("ncage", "NCAGE Code", "A1B2C"),
]


class LoginScreen(BaseScreen):
    """
    Role selection and registration. Dismissed once a session is set.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr"):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Role")
                    yield Select(
                        ROLE_OPTIONS,
                        value="manufacturer",
                        allow_blank=False,
                        id="select-login-role",
                    )
                    yield Label("Email or ID", id="label-login-ident")
                    yield Input(placeholder="user@example.com", id="input-login-ident")
                    with Horizontal(id="div-login-btns"):
                        yield Button("Quit", id="btn-quit")
                        yield Button("Login", id="btn-login", variant="primary")

            with TabPane("Apply", id="tab-apply"):
                with VerticalScroll(id="div-reg"):
                    yield Label("Apply as")
                    yield Select(
                        ROLE_OPTIONS[:2],
                        value="manufacturer",
                        allow_blank=False,
                        id="select-reg-role",
                    )
                    for name, label, placeholder in APPLY_FIELDS:
                        yield Label(label, id=f"label-reg-{name}")
                        yield Input(placeholder=placeholder, id=f"input-reg-{name}")
                    yield Label("Membership", id="label-reg-membership")
                    yield Select(
                        [(m, m) for m in MEMBERSHIPS],
                        value=MEMBERSHIPS[0],
                        allow_blank=False,
                        id="select-reg-membership",
                    )
                    with Container(id="div-reg-btns"):
                        yield Button("Submit Application", id="btn-reg", variant="primary")

    def on_mount(self):
        self.query_one("#select-login-role").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one(
            "#input-login-ident"
        ):
            self.handle_login_submit()

    @on(Select.Changed, "#select-login-role")
    def handle_login_role_changed(self, event: Select.Changed) -> None:
        is_admin = event.value == "admin"
        self.query_one("#label-login-ident").display = not is_admin
        self.query_one("#input-login-ident").display = not is_admin

    @on(Select.Changed, "#select-reg-role")
    def handle_reg_role_changed(self, event: Select.Changed) -> None:
        # ncage and membership only apply to manufacturers
        is_mfr = event.value == "manufacturer"
        for wid in (
            "#label-reg-ncage",
            "#input-reg-ncage",
            "#label-reg-membership",
            "#select-reg-membership",
        ):
            self.query_one(wid).display = is_mfr

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        role = self.query_one("#select-login-role", Select).value
        ident_input = self.query_one("#input-login-ident", Input)

        try:
            session = await self.app.state.login(role, ident_input.value)
        except IdentityNotFoundError:
            self.notify("No account found for that email or ID.", severity="error")
            ident_input.focus()
            ident_input.add_class("-invalid")
            return
        except DshError as e:
            self.notify(error_text(e), severity="error")
            return

        ident_input.remove_class("-invalid")
        self.notify(f"Welcome {session.name}!")
        self.app.post_message(UserLoginMessage())
        self.dismiss()

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        role = self.query_one("#select-reg-role", Select).value
        data = {
            name: self.query_one(f"#input-reg-{name}", Input).value
            for name, _, _ in APPLY_FIELDS
        }

        if role == "manufacturer":
            data["membership"] = self.query_one("#select-reg-membership", Select).value
            register = self.app.state.register_manufacturer(data)
        else:
            data.pop("ncage")
            register = self.app.state.register_customer(data)

        record = await self.run_op(register)
        if record is None:
            return

        await self.app.push_screen_wait(
            SimpleDialogModal(
                f"Application submitted for {record.company}.\n"
                f"Status: {record.status}. ID: {record.id}",
                tone="positive",
            )
        )

        for name, _, _ in APPLY_FIELDS:
            self.query_one(f"#input-reg-{name}", Input).value = ""

        self.get_child_by_type(TabbedContent).active = "tab-login"
        self.query_one("#select-login-role", Select).value = role
        ident_input = self.query_one("#input-login-ident", Input)
        ident_input.value = record.email
        self.query_one("#btn-login").focus()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
