import os
import sqlite3
import sys
import tempfile
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import database as db_database  # noqa: E402
from db import storage  # noqa: E402
from db.errors import StorageError  # noqa: E402
from db.models import Manufacturer, Product  # noqa: E402


class StorageTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point the DB to a temporary file and force re-initialization
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "nested", "test.sqlite")
        db_database.DB_PATH = self.db_path
        db_database._initialized = False

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_load_missing_key_returns_fallback(self):
        self.assertEqual(await storage.load("manufacturers", []), [])
        self.assertIsNone(await storage.load("auth", None))
        # the directory of the database file is created on demand
        self.assertTrue(os.path.exists(self.db_path))

    async def test_save_then_load_round_trip(self):
        value = [
            {"id": "r1", "part": "Drone Motor", "qty": 50, "quotes": []},
            {"id": "r2", "part": "Optical Sensor", "qty": 3, "notes": "ÄÖ"},
        ]
        await storage.save("rfqs", value)
        self.assertEqual(await storage.load("rfqs", []), value)

    async def test_save_overwrites_previous_value(self):
        await storage.save("auth", {"role": "admin", "id": None, "name": "A"})
        await storage.save("auth", {"role": "customer", "id": "c1", "name": "B"})
        loaded = await storage.load("auth", None)
        self.assertEqual(loaded["id"], "c1")

    async def test_dataclasses_are_stored_as_objects(self):
        mfr = Manufacturer(
            id="m1",
            company="Acme Co",
            country="Finland",
            email="a@acme.test",
            products=(Product(id="p1", name="Motor", qty=1, lead=2, price=3.5),),
        )
        await storage.save("manufacturers", (mfr,))
        loaded = await storage.load("manufacturers", [])
        self.assertEqual(loaded[0]["company"], "Acme Co")
        self.assertEqual(loaded[0]["products"][0]["price"], 3.5)
        self.assertEqual(Manufacturer.from_dict(loaded[0]), mfr)

    async def test_corrupt_value_falls_back(self):
        async with db_database.connect() as conn:
            await conn.execute(
                "INSERT INTO kv(key, value) VALUES (?, ?);", ("customers", "[{oops")
            )
            await conn.commit()
        self.assertEqual(await storage.load("customers", []), [])

    async def test_unserializable_value_raises_storage_error(self):
        await storage.save("customers", [{"id": "c1"}])
        with self.assertRaises(StorageError) as ctx:
            await storage.save("customers", [object()])
        self.assertEqual(ctx.exception.key, "customers")
        # previous value untouched
        self.assertEqual(await storage.load("customers", []), [{"id": "c1"}])

    async def test_unwritable_database_raises_storage_error(self):
        # a directory cannot be opened as a database file
        db_database.DB_PATH = self.temp_dir.name
        with self.assertRaises(StorageError):
            await storage.save("rfqs", [])
        self.assertEqual(await storage.load("rfqs", ["fallback"]), ["fallback"])

    async def test_failed_init_closes_connection(self):
        opened = []
        init_db = db_database._init_db

        async def failing_init(conn):
            opened.append(conn)
            raise sqlite3.OperationalError("disk I/O error")

        db_database._init_db = failing_init
        try:
            with self.assertRaises(StorageError):
                await storage.save("rfqs", [])
        finally:
            db_database._init_db = init_db

        self.assertEqual(len(opened), 1)
        self.assertFalse(db_database._initialized)
        # a closed aiosqlite connection refuses further statements
        with self.assertRaises(ValueError):
            await opened[0].execute("SELECT 1;")

        # the next connection retries the schema
        await storage.save("rfqs", [{"id": "r1"}])
        self.assertEqual(await storage.load("rfqs", []), [{"id": "r1"}])

    async def test_delete(self):
        await storage.save("auth", {"role": "admin"})
        await storage.delete("auth")
        self.assertIsNone(await storage.load("auth", None))
        # deleting a missing key is fine
        await storage.delete("auth")
