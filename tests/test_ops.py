import dataclasses
import os
import sys
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import ops  # noqa: E402
from db.errors import NotFoundError, ValidationError  # noqa: E402
from db.models import Customer, RecordState  # noqa: E402
from db.seed import demo_state  # noqa: E402
from utils.pure import generate_markdown_table, update_by_id  # noqa: E402

ACME = {"company": "Acme Co", "country": "Finland", "email": "a@acme.test"}


def with_customer(customer_id: str = "c1") -> RecordState:
    cust = Customer(id=customer_id, company="ArmaTech", country="UA", email="x@y")
    return RecordState(customers=(cust,))


class RegistrationTestCase(unittest.TestCase):
    def test_register_then_approve_manufacturer(self):
        state, mfr = ops.register_manufacturer(RecordState(), ACME)
        self.assertEqual(len(state.manufacturers), 1)
        self.assertIs(state.manufacturers[0], mfr)
        self.assertEqual(mfr.status, "Application Submitted")
        self.assertEqual(mfr.products, ())
        self.assertEqual(mfr.membership, "Basic")
        self.assertTrue(mfr.id)

        state, approved = ops.approve_manufacturer(state, mfr.id)
        self.assertEqual(approved.status, "Approved")
        self.assertEqual(approved, dataclasses.replace(mfr, status="Approved"))
        self.assertEqual(state.manufacturers, (approved,))

    def test_new_records_are_prepended_with_fresh_ids(self):
        state = RecordState()
        ids = []
        for i in range(50):
            state, cust = ops.register_customer(
                state, {**ACME, "company": f"Company {i}"}
            )
            self.assertIs(state.customers[0], cust)
            self.assertEqual(cust.status, "Application Submitted")
            ids.append(cust.id)
        self.assertEqual(len(set(ids)), 50)
        self.assertEqual(state.customers[-1].company, "Company 0")

    def test_required_fields(self):
        for missing in ("company", "country", "email"):
            payload = {**ACME, missing: "   "}
            with self.assertRaises(ValidationError) as ctx:
                ops.register_manufacturer(RecordState(), payload)
            self.assertEqual(ctx.exception.field, missing)
        with self.assertRaises(ValidationError):
            ops.register_customer(RecordState(), {"company": "X"})

    def test_payload_cannot_set_id_status_or_products(self):
        state, mfr = ops.register_manufacturer(
            RecordState(),
            {**ACME, "id": "m1", "status": "Approved", "products": [{"id": "p"}]},
        )
        self.assertNotEqual(mfr.id, "m1")
        self.assertEqual(mfr.status, "Application Submitted")
        self.assertEqual(mfr.products, ())

    def test_membership_is_validated(self):
        _, mfr = ops.register_manufacturer(RecordState(), {**ACME, "membership": "Advanced"})
        self.assertEqual(mfr.membership, "Advanced")
        with self.assertRaises(ValidationError):
            ops.register_manufacturer(RecordState(), {**ACME, "membership": "Gold"})

    def test_duplicate_registrations_are_accepted(self):
        state, first = ops.register_customer(RecordState(), ACME)
        state, second = ops.register_customer(state, ACME)
        self.assertEqual(len(state.customers), 2)
        self.assertNotEqual(first.id, second.id)


class StatusTestCase(unittest.TestCase):
    def test_approve_is_idempotent(self):
        state, mfr = ops.register_manufacturer(RecordState(), ACME)
        once, _ = ops.approve_manufacturer(state, mfr.id)
        twice, _ = ops.approve_manufacturer(once, mfr.id)
        self.assertEqual(once, twice)

    def test_approve_unknown_id(self):
        state = demo_state()
        with self.assertRaises(NotFoundError):
            ops.approve_manufacturer(state, "nope")
        with self.assertRaises(NotFoundError):
            ops.approve_customer(state, "nope")
        self.assertEqual(state, demo_state())

    def test_review_never_moves_backwards(self):
        state, cust = ops.register_customer(RecordState(), ACME)
        state, cust = ops.review_customer(state, cust.id)
        self.assertEqual(cust.status, "Pending")
        state, cust = ops.approve_customer(state, cust.id)
        state, cust = ops.review_customer(state, cust.id)
        self.assertEqual(cust.status, "Approved")

        state, mfr = ops.register_manufacturer(state, ACME)
        state, mfr = ops.review_manufacturer(state, mfr.id)
        self.assertEqual(mfr.status, "Under Review")


class ProfileAndProductTestCase(unittest.TestCase):
    def test_update_profile_merges_fields(self):
        state, mfr = ops.register_manufacturer(RecordState(), ACME)
        state, updated = ops.update_profile(
            state, mfr.id, {"phone": " +358 1 ", "profile": "Motors", "membership": "Moderate"}
        )
        self.assertEqual(updated.phone, "+358 1")
        self.assertEqual(updated.profile, "Motors")
        self.assertEqual(updated.membership, "Moderate")
        self.assertEqual(updated.company, "Acme Co")

    def test_update_profile_of_customer(self):
        state, cust = ops.register_customer(RecordState(), ACME)
        state, updated = ops.update_profile(state, cust.id, {"contact": "Olena"})
        self.assertEqual(updated.contact, "Olena")
        with self.assertRaises(ValidationError):
            ops.update_profile(state, cust.id, {"ncage": "A1B2C"})

    def test_update_profile_rejects_protected_and_blank_fields(self):
        state, mfr = ops.register_manufacturer(RecordState(), ACME)
        for patch in ({"status": "Approved"}, {"id": "m9"}, {"products": []}, {"email": ""}):
            with self.assertRaises(ValidationError):
                ops.update_profile(state, mfr.id, patch)

    def test_update_profile_blank_membership_keeps_tier(self):
        state, mfr = ops.register_manufacturer(
            RecordState(), dict(ACME, membership="Advanced")
        )
        for patch in ({"membership": None}, {"membership": ""}, {"membership": "  "}):
            with self.assertRaises(ValidationError) as ctx:
                ops.update_profile(state, mfr.id, patch)
            self.assertEqual(ctx.exception.field, "membership")
        self.assertEqual(state.manufacturers[0].membership, "Advanced")

    def test_update_profile_unknown_id(self):
        with self.assertRaises(NotFoundError):
            ops.update_profile(RecordState(), "m404", {"phone": "1"})

    def test_add_product_coerces_numbers(self):
        state, mfr = ops.register_manufacturer(RecordState(), ACME)
        state, p1 = ops.add_product(
            state, mfr.id, {"name": "Motor", "qty": "10", "lead": " 14 ", "price": "99.5"}
        )
        state, p2 = ops.add_product(
            state, mfr.id, {"name": "Mount", "qty": 0, "lead": 0, "price": 0}
        )
        self.assertEqual((p1.qty, p1.lead, p1.price), (10, 14, 99.5))
        self.assertNotEqual(p1.id, p2.id)
        self.assertEqual(state.manufacturers[0].products, (p1, p2))

    def test_add_product_validation(self):
        state, mfr = ops.register_manufacturer(RecordState(), ACME)
        good = {"name": "Motor", "qty": "1", "lead": "1", "price": "1"}
        bad_payloads = [
            {**good, "name": ""},
            {**good, "qty": "ten"},
            {**good, "qty": "-1"},
            {**good, "lead": "1.5"},
            {**good, "price": "-0.01"},
            {**good, "price": "nan"},
            {k: v for k, v in good.items() if k != "price"},
        ]
        for payload in bad_payloads:
            with self.assertRaises(ValidationError):
                ops.add_product(state, mfr.id, payload)
        with self.assertRaises(NotFoundError):
            ops.add_product(state, "m404", good)


class RfqTestCase(unittest.TestCase):
    def test_create_rfq(self):
        state, rfq = ops.create_rfq(
            with_customer("c1"), {"part": "Drone Motor", "qty": "50", "customerId": "c1"}
        )
        self.assertEqual(state.rfqs, (rfq,))
        self.assertEqual(rfq.status, "New")
        self.assertEqual(rfq.quotes, ())
        self.assertEqual((rfq.part, rfq.qty, rfq.customerId), ("Drone Motor", 50, "c1"))

    def test_create_rfq_ignores_status_and_quotes(self):
        _, rfq = ops.create_rfq(
            with_customer(),
            {
                "part": "Sensor",
                "qty": 2,
                "customerId": "c1",
                "status": "Awaiting Payment",
                "quotes": [{"id": "q1"}],
            },
        )
        self.assertEqual(rfq.status, "New")
        self.assertEqual(rfq.quotes, ())

    def test_create_rfq_validation(self):
        state = with_customer()
        with self.assertRaises(NotFoundError):
            ops.create_rfq(state, {"part": "Sensor", "qty": 1, "customerId": "c9"})
        with self.assertRaises(ValidationError):
            ops.create_rfq(state, {"part": "", "qty": 1, "customerId": "c1"})
        with self.assertRaises(ValidationError):
            ops.create_rfq(state, {"part": "Sensor", "qty": "0", "customerId": "c1"})

    def test_quote_then_accept(self):
        state = demo_state()  # m1 approved, m2 under review
        state, rfq = ops.create_rfq(state, {"part": "Sensor", "qty": 5, "customerId": "c1"})

        with self.assertRaises(ValidationError):
            ops.submit_quote(state, rfq.id, "m2", {"price": "10", "lead": "5"})

        state, quote = ops.submit_quote(state, rfq.id, "m1", {"price": "10", "lead": "5"})
        rfq = state.rfqs[0]
        self.assertEqual(rfq.status, "Quote Waiting")
        self.assertEqual(rfq.quotes, (quote,))
        self.assertEqual(quote.manufacturerId, "m1")

        state, rfq = ops.accept_quote(state, rfq.id, quote.id)
        self.assertEqual(rfq.status, "Awaiting Payment")
        self.assertEqual(rfq.acceptedQuoteId, quote.id)

        # accepting again is a no-op, new quotes are refused
        again, _ = ops.accept_quote(state, rfq.id, quote.id)
        self.assertEqual(again, state)
        with self.assertRaises(ValidationError):
            ops.submit_quote(state, rfq.id, "m1", {"price": "9", "lead": "5"})

    def test_accept_unknown_quote(self):
        state = demo_state()
        with self.assertRaises(NotFoundError):
            ops.accept_quote(state, "r1", "q404")
        with self.assertRaises(NotFoundError):
            ops.accept_quote(state, "r404", "q1")
        # q1 belongs to r1, not r2
        with self.assertRaises(NotFoundError):
            ops.accept_quote(state, "r2", "q1")


class PureHelpersTestCase(unittest.TestCase):
    def test_update_by_id(self):
        customers = with_customer("c1").customers
        updated, found = update_by_id(customers, "c1", {"status": "Approved"})
        self.assertTrue(found)
        self.assertEqual(updated[0].status, "Approved")

        same, found = update_by_id(customers, "c2", {"status": "Approved"})
        self.assertFalse(found)
        self.assertEqual(same, customers)

    def test_generate_markdown_table(self):
        md = generate_markdown_table(["A", "B"], [["x|y", 1]], ["l", "r"])
        self.assertEqual(md, "| A | B |\n| :--- | ---: |\n| x\\|y | 1 |")
        self.assertEqual(generate_markdown_table(None, []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A"], [["1"]], ["l", "r"])
