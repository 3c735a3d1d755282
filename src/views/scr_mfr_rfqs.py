from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label

from views.base_screen import BaseScreen


class ManufacturerRfqScreen(BaseScreen):
    """
    Open RFQs from all customers; an approved manufacturer can quote on them.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-open-rfqs")
            with Horizontal(id="hort-controls"):
                with Vertical():
                    yield Label("Unit Price (EUR):")
                    yield Input(
                        id="input-quote-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                with Vertical():
                    yield Label("Lead (days):")
                    yield Input(
                        id="input-quote-lead",
                        type="integer",
                        validators=[Number(minimum=0)],
                    )
                with Vertical():
                    yield Label("Notes:")
                    yield Input(id="input-quote-notes")
                with Horizontal(id="div-button"):
                    yield Button("Send Quote", id="btn-send-quote", variant="success")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Part", "Qty", "Delivery", "Customer", "Quotes", "Status")

    def refresh_content(self) -> None:
        state = self.app.state
        table = self.query_one(DataTable)
        table.clear()
        for r in state.open_rfqs():
            cust = state.customer(r.customerId)
            table.add_row(
                r.part,
                r.qty,
                r.delivery or "-",
                cust.company if cust else r.customerId,
                len(r.quotes),
                r.status,
                key=r.id,
            )

        mfr = state.current_manufacturer()
        self.query_one("#btn-send-quote", Button).disabled = (
            mfr is None or mfr.status != "Approved"
        )

    @on(Button.Pressed, "#btn-send-quote")
    @work(exclusive=True)
    async def handle_send_quote(self) -> None:
        rfq_id = self.selected_key(self.query_one(DataTable))
        if rfq_id is None:
            self.notify("Select an RFQ first.", severity="warning")
            return

        inputs = {
            name: self.query_one(f"#input-quote-{name}", Input)
            for name in ("price", "lead", "notes")
        }
        quote = await self.run_op(
            self.app.state.submit_quote(
                rfq_id,
                self.app.state.uid,
                {name: inp.value for name, inp in inputs.items()},
            ),
            "Quote sent.",
        )
        if quote is None:
            return
        for inp in inputs.values():
            inp.value = ""
        self.refresh_content()
