from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label

from views.base_screen import BaseScreen


class ManufacturerProductsScreen(BaseScreen):
    """
    Product catalogue of the logged-in manufacturer; products can only be added.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-products")
            with Horizontal(id="hort-controls"):
                with Vertical():
                    yield Label("Name:")
                    yield Input(placeholder="Drone Motor DM-40", id="input-prod-name")
                with Vertical():
                    yield Label("Qty:")
                    yield Input(
                        id="input-prod-qty",
                        type="integer",
                        validators=[Number(minimum=0)],
                    )
                with Vertical():
                    yield Label("Lead (days):")
                    yield Input(
                        id="input-prod-lead",
                        type="integer",
                        validators=[Number(minimum=0)],
                    )
                with Vertical():
                    yield Label("Price (EUR):")
                    yield Input(
                        id="input-prod-price",
                        type="number",
                        validators=[Number(minimum=0.0)],
                    )
                with Horizontal(id="div-button"):
                    yield Button("Add", id="btn-add-product", variant="success")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Name", "Qty", "Lead (days)", "Price (EUR)")

    def refresh_content(self) -> None:
        mfr = self.app.state.current_manufacturer()
        table = self.query_one(DataTable)
        table.clear()
        if mfr is None:
            return
        for p in mfr.products:
            table.add_row(p.name, p.qty, p.lead, f"{p.price:.2f}", key=p.id)

    @on(Button.Pressed, "#btn-add-product")
    @work(exclusive=True)
    async def handle_add(self) -> None:
        mfr = self.app.state.current_manufacturer()
        if mfr is None:
            return

        inputs = {
            name: self.query_one(f"#input-prod-{name}", Input)
            for name in ("name", "qty", "lead", "price")
        }
        product = await self.run_op(
            self.app.state.add_product(
                mfr.id, {name: inp.value for name, inp in inputs.items()}
            )
        )
        if product is None:
            return

        self.notify(f"{product.name} added.")
        for inp in inputs.values():
            inp.value = ""
        inputs["name"].focus()
        self.refresh_content()
