from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label

from db.models import RFQ
from views.base_screen import BaseScreen


class CustomerRfqScreen(BaseScreen):
    """
    Customers submit RFQs and accept quotes received on them.

    Layout:
    - RFQ table (most recent first), quotes of the highlighted RFQ below it.
    - New RFQ form at the bottom.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-rfqs")
            yield DataTable(id="table-quotes")
            with Horizontal(id="div-quote-btns"):
                yield Button("Accept Quote", id="btn-accept-quote", variant="primary")
            with Horizontal(id="hort-controls"):
                with Vertical():
                    yield Label("Part:")
                    yield Input(placeholder="Drone Motor", id="input-rfq-part")
                with Vertical():
                    yield Label("Qty:")
                    yield Input(
                        id="input-rfq-qty",
                        type="integer",
                        validators=[Number(minimum=1)],
                    )
                with Vertical():
                    yield Label("Delivery:")
                    yield Input(placeholder="Q3 2026", id="input-rfq-delivery")
                with Vertical():
                    yield Label("Notes:")
                    yield Input(id="input-rfq-notes")
                with Horizontal(id="div-button"):
                    yield Button("Submit RFQ", id="btn-submit-rfq", variant="success")

    def on_mount(self) -> None:
        rfq_table = self.query_one("#table-rfqs", DataTable)
        rfq_table.cursor_type = "row"
        rfq_table.zebra_stripes = True
        rfq_table.add_columns("Part", "Qty", "Delivery", "Status", "Quotes")

        quote_table = self.query_one("#table-quotes", DataTable)
        quote_table.cursor_type = "row"
        quote_table.add_columns("Manufacturer", "Unit Price", "Lead (days)", "Notes", "")

    def refresh_content(self) -> None:
        table = self.query_one("#table-rfqs", DataTable)
        table.clear()
        cust = self.app.state.current_customer()
        if cust is not None:
            for r in self.app.state.rfqs_for_customer(cust.id):
                table.add_row(
                    r.part,
                    r.qty,
                    r.delivery or "-",
                    r.status,
                    len(r.quotes),
                    key=r.id,
                )
        self._render_quotes()

    def _selected_rfq(self) -> Optional[RFQ]:
        rfq_id = self.selected_key(self.query_one("#table-rfqs", DataTable))
        return self.app.state.rfq(rfq_id) if rfq_id else None

    @on(DataTable.RowHighlighted, "#table-rfqs")
    def handle_rfq_highlight(self) -> None:
        self._render_quotes()

    def _render_quotes(self) -> None:
        table = self.query_one("#table-quotes", DataTable)
        table.clear()
        rfq = self._selected_rfq()
        accept_btn = self.query_one("#btn-accept-quote", Button)
        accept_btn.disabled = rfq is None or rfq.acceptedQuoteId is not None
        if rfq is None:
            return
        for q in rfq.quotes:
            mfr = self.app.state.manufacturer(q.manufacturerId)
            table.add_row(
                mfr.company if mfr else q.manufacturerId,
                f"{q.price:.2f}",
                q.lead,
                q.notes or "-",
                "accepted" if q.id == rfq.acceptedQuoteId else "",
                key=q.id,
            )

    @on(Button.Pressed, "#btn-accept-quote")
    @work(exclusive=True)
    async def handle_accept(self) -> None:
        rfq = self._selected_rfq()
        quote_id = self.selected_key(self.query_one("#table-quotes", DataTable))
        if rfq is None or quote_id is None:
            self.notify("Select a quote first.", severity="warning")
            return
        if await self.run_op(
            self.app.state.accept_quote(rfq.id, quote_id),
            "Quote accepted, awaiting payment.",
        ):
            self.refresh_content()

    @on(Button.Pressed, "#btn-submit-rfq")
    @work(exclusive=True)
    async def handle_submit(self) -> None:
        cust = self.app.state.current_customer()
        if cust is None:
            return

        inputs = {
            name: self.query_one(f"#input-rfq-{name}", Input)
            for name in ("part", "qty", "delivery", "notes")
        }
        payload = {name: inp.value for name, inp in inputs.items()}
        payload["customerId"] = cust.id

        rfq = await self.run_op(self.app.state.create_rfq(payload), "RFQ submitted.")
        if rfq is None:
            return
        for inp in inputs.values():
            inp.value = ""
        self.refresh_content()
