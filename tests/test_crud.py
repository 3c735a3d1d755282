import os
import sys
import tempfile
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import crud, storage  # noqa: E402
from db import database as db_database  # noqa: E402
from db.models import RecordState, Session  # noqa: E402
from db.seed import demo_state, seed_if_empty  # noqa: E402


class CrudTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database._initialized = False

    def tearDown(self):
        self.temp_dir.cleanup()

    # ---------- Collections ----------

    async def test_load_records_on_empty_store(self):
        self.assertEqual(await crud.load_records(), RecordState())

    async def test_save_and_load_records(self):
        state = demo_state()
        await crud.save_records(state)
        self.assertEqual(await crud.load_records(), state)

    async def test_save_single_collection(self):
        state = demo_state()
        await crud.save_customers(state)
        loaded = await crud.load_records()
        self.assertEqual(loaded.customers, state.customers)
        self.assertEqual(loaded.manufacturers, ())
        self.assertEqual(loaded.rfqs, ())

    async def test_malformed_entries_are_skipped(self):
        await storage.save(
            "customers",
            [
                {"id": "c1", "company": "ArmaTech", "country": "UA", "email": "a@x"},
                {"id": "c2"},  # missing required fields
                "not a record",
                {
                    "id": "c3",
                    "company": "Defence Solutions Ltd",
                    "country": "EE",
                    "email": "d@x",
                    "legacyField": 1,
                },
            ],
        )
        await storage.save("rfqs", {"not": "a list"})
        records = await crud.load_records()
        self.assertEqual([c.id for c in records.customers], ["c1", "c3"])
        self.assertEqual(records.rfqs, ())

    # ---------- Session ----------

    async def test_session_round_trip_and_clear(self):
        self.assertIsNone(await crud.load_session())

        session = Session(role="customer", id="c1", name="ArmaTech")
        await crud.save_session(session)
        self.assertEqual(await crud.load_session(), session)

        await crud.save_session(None)
        self.assertIsNone(await crud.load_session())

    async def test_malformed_session_is_ignored(self):
        await storage.save("auth", {"role": "root", "id": None, "name": "x"})
        self.assertIsNone(await crud.load_session())
        await storage.save("auth", ["admin"])
        self.assertIsNone(await crud.load_session())

    # ---------- Seed ----------

    async def test_seed_only_fills_empty_store(self):
        self.assertTrue(await seed_if_empty())
        records = await crud.load_records()
        self.assertEqual([m.id for m in records.manufacturers], ["m1", "m2"])
        self.assertFalse(await seed_if_empty())
