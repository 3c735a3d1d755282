from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, TabbedContent, TabPane

from views.base_screen import BaseScreen


class AdminScreen(BaseScreen):
    """
    All manufacturers, customers and RFQs. Applications of manufacturers and
    customers can be moved to review and approved from here.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            with TabbedContent(id="tabs-admin"):
                with TabPane("Manufacturers", id="tab-manufacturers"):
                    yield DataTable(id="table-manufacturers")
                with TabPane("Customers", id="tab-customers"):
                    yield DataTable(id="table-customers")
                with TabPane("RFQs", id="tab-rfqs"):
                    yield DataTable(id="table-rfqs")
            with Horizontal(id="hort-admin-controls"):
                yield Button("Start Review", id="btn-review", variant="warning")
                yield Button("Approve", id="btn-approve", variant="success")

    def on_mount(self) -> None:
        columns = {
            "#table-manufacturers": (
                "Company",
                "Country",
                "Membership",
                "NCAGE",
                "Email",
                "Products",
                "Status",
            ),
            "#table-customers": ("Company", "Country", "Contact", "Email", "Status"),
            "#table-rfqs": ("Part", "Qty", "Customer", "Quotes", "Status"),
        }
        for table_id, cols in columns.items():
            table = self.query_one(table_id, DataTable)
            table.cursor_type = "row"
            table.zebra_stripes = True
            table.add_columns(*cols)

    def refresh_content(self) -> None:
        records = self.app.state.records

        table = self.query_one("#table-manufacturers", DataTable)
        table.clear()
        for m in records.manufacturers:
            table.add_row(
                m.company,
                m.country,
                m.membership,
                m.ncage or "-",
                m.email,
                len(m.products),
                m.status,
                key=m.id,
            )

        table = self.query_one("#table-customers", DataTable)
        table.clear()
        for c in records.customers:
            table.add_row(
                c.company, c.country, c.contact or "-", c.email, c.status, key=c.id
            )

        table = self.query_one("#table-rfqs", DataTable)
        table.clear()
        for r in records.rfqs:
            cust = self.app.state.customer(r.customerId)
            table.add_row(
                r.part,
                r.qty,
                cust.company if cust else r.customerId,
                len(r.quotes),
                r.status,
                key=r.id,
            )

    def _active_party(self) -> Optional[str]:
        active = self.query_one("#tabs-admin", TabbedContent).active
        if active == "tab-manufacturers":
            return "manufacturer"
        if active == "tab-customers":
            return "customer"
        return None

    @on(TabbedContent.TabActivated, "#tabs-admin")
    def handle_tab_change(self) -> None:
        on_party_tab = self._active_party() is not None
        self.query_one("#btn-review", Button).disabled = not on_party_tab
        self.query_one("#btn-approve", Button).disabled = not on_party_tab

    @on(Button.Pressed, "#btn-review")
    @on(Button.Pressed, "#btn-approve")
    @work(exclusive=True)
    async def handle_status_change(self, event: Button.Pressed) -> None:
        party = self._active_party()
        if party is None:
            return
        record_id = self.selected_key(self.query_one(f"#table-{party}s", DataTable))
        if record_id is None:
            self.notify(f"No {party} selected.", severity="warning")
            return

        state = self.app.state
        if event.button.id == "btn-approve":
            op = getattr(state, f"approve_{party}")
        else:
            op = getattr(state, f"review_{party}")

        record = await self.run_op(op(record_id))
        if record is None:
            return
        self.notify(f"{record.company}: {record.status}")
        self.refresh_content()
