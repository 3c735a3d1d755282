from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, Input, Label, MarkdownViewer, Select, TextArea

from db.models import MEMBERSHIPS
from utils.pure import generate_markdown_table
from views.base_screen import BaseScreen

# editable single-line fields shown in the form
EDIT_FIELDS = [
    ("contact", "Contact Person"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("registrationNumber", "Registration Number"),
    ("ncage", "NCAGE Code"),
]


class ManufacturerProfileScreen(BaseScreen):
    """
    Company details and application status, with an edit form.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal():
            yield MarkdownViewer(id="md-profile", show_table_of_contents=False)
            with VerticalScroll(id="div-profile-form"):
                for name, label in EDIT_FIELDS:
                    yield Label(label)
                    yield Input(id=f"input-profile-{name}")
                yield Label("Membership")
                yield Select(
                    [(m, m) for m in MEMBERSHIPS],
                    allow_blank=False,
                    id="select-profile-membership",
                )
                yield Label("Company Profile")
                yield TextArea(id="ta-profile")
                with Vertical(id="div-button"):
                    yield Button("Save", id="btn-save-profile", variant="success")

    def refresh_content(self) -> None:
        mfr = self.app.state.current_manufacturer()
        if mfr is None:
            return

        rows = [
            ["Company", mfr.company],
            ["Country", mfr.country],
            ["Status", mfr.status],
            ["Membership", mfr.membership],
            ["Registration Number", mfr.registrationNumber or "-"],
            ["NCAGE", mfr.ncage or "-"],
            ["Contact", mfr.contact or "-"],
            ["Email", mfr.email],
            ["Phone", mfr.phone or "-"],
            ["Products listed", len(mfr.products)],
        ]
        md = (
            f"### {mfr.company}\n\n"
            + generate_markdown_table(["Attribute", "Value"], rows)
            + f"\n\n#### Profile\n\n{mfr.profile or '_No profile yet._'}\n"
        )
        self.query_one("#md-profile", MarkdownViewer).document.update(md)

        # prefill inputs with current values
        for name, _ in EDIT_FIELDS:
            self.query_one(f"#input-profile-{name}", Input).value = getattr(mfr, name)
        self.query_one("#select-profile-membership", Select).value = mfr.membership
        self.query_one("#ta-profile", TextArea).text = mfr.profile

    @on(Button.Pressed, "#btn-save-profile")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        mfr = self.app.state.current_manufacturer()
        if mfr is None:
            return

        form = {
            name: self.query_one(f"#input-profile-{name}", Input).value.strip()
            for name, _ in EDIT_FIELDS
        }
        form["membership"] = self.query_one("#select-profile-membership", Select).value
        form["profile"] = self.query_one("#ta-profile", TextArea).text.strip()

        patch = {k: v for k, v in form.items() if v != getattr(mfr, k)}
        if not patch:
            self.notify("Nothing to update.", severity="warning")
            return

        if await self.run_op(
            self.app.state.update_profile(mfr.id, patch), "Profile updated."
        ):
            self.refresh_content()
