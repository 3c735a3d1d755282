# demo records for a fresh store, enabled with DSH_SEED_DEMO=1
from db import crud
from db.models import RFQ, Customer, Manufacturer, Product, Quote, RecordState
from utils.logger import get_logger

_logger = get_logger(__name__)


def demo_state() -> RecordState:
    manufacturers = (
        Manufacturer(
            id="m1",
            company="Nordic Defence Components",
            country="Finland",
            email="sales@nordic-defence.test",
            registrationNumber="FI-2931847",
            contact="Aino Virtanen",
            phone="+358 40 123 4567",
            ncage="A1B2C",
            membership="Advanced",
            profile="Precision drive trains and motors for unmanned systems.",
            products=(
                Product(id="p1", name="Drone Motor DM-40", qty=120, lead=21, price=480.0),
                Product(id="p2", name="Gimbal Mount GM-2", qty=40, lead=35, price=1250.0),
            ),
            status="Approved",
        ),
        Manufacturer(
            id="m2",
            company="EuroTech Supplies",
            country="Poland",
            email="info@eurotech.test",
            registrationNumber="PL-5521903",
            contact="Piotr Nowak",
            phone="+48 22 555 0101",
            ncage="P9Q8R",
            membership="Basic",
            profile="Optical and thermal sensor assemblies.",
            status="Under Review",
        ),
    )
    customers = (
        Customer(
            id="c1",
            company="ArmaTech",
            country="Ukraine",
            email="procurement@armatech.test",
            registrationNumber="UA-40117235",
            contact="Olena Kovalenko",
            phone="+380 44 200 1234",
            status="Approved",
        ),
        Customer(
            id="c2",
            company="Defence Solutions Ltd",
            country="Estonia",
            email="buyers@defsol.test",
            registrationNumber="EE-14432109",
            contact="Mart Tamm",
            phone="+372 600 1234",
            status="Pending",
        ),
    )
    rfqs = (
        RFQ(
            id="r1",
            customerId="c1",
            part="Drone Motor",
            qty=50,
            delivery="Q3",
            notes="IP67 rating required",
            status="Quote Waiting",
            quotes=(Quote(id="q1", manufacturerId="m1", price=455.0, lead=28),),
        ),
        RFQ(
            id="r2",
            customerId="c2",
            part="Optical Sensor",
            qty=10,
            delivery="Q4",
            status="Awaiting Payment",
            quotes=(Quote(id="q2", manufacturerId="m1", price=2100.0, lead=45),),
            acceptedQuoteId="q2",
        ),
    )
    return RecordState(manufacturers=manufacturers, customers=customers, rfqs=rfqs)


async def seed_if_empty() -> bool:
    """Write demo records when no collection holds data. Returns True if seeded."""
    current = await crud.load_records()
    if current.manufacturers or current.customers or current.rfqs:
        return False
    _logger.info("Seeding demo records...")
    await crud.save_records(demo_state())
    return True
