# JSON key-value store on top of the kv table
from __future__ import annotations

import dataclasses
import json
import sqlite3
from typing import Any, TypeVar

from db.database import connect
from db.errors import StorageError
from utils.logger import get_logger

_logger = get_logger(__name__)

T = TypeVar("T")

MANUFACTURERS_KEY = "manufacturers"
CUSTOMERS_KEY = "customers"
RFQS_KEY = "rfqs"
AUTH_KEY = "auth"


def _encode_default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def dumps(value: Any) -> str:
    return json.dumps(value, default=_encode_default, ensure_ascii=False)


async def load(key: str, fallback: T) -> T:
    """
    Return the deserialized value stored under key.
    Falls back when the key is absent, the stored text is not valid JSON,
    or the database cannot be read. Never raises.
    """
    try:
        async with connect() as conn:
            cur = await conn.execute("SELECT value FROM kv WHERE key = ?;", (key,))
            row = await cur.fetchone()
            await cur.close()
    except (sqlite3.Error, OSError) as e:
        _logger.warning(f"Reading '{key}' failed, using fallback: {e}")
        return fallback

    if row is None:
        return fallback
    try:
        return json.loads(row[0])
    except (TypeError, ValueError) as e:
        _logger.warning(f"Stored value for '{key}' is corrupt, using fallback: {e}")
        return fallback


async def save(key: str, value: Any) -> None:
    """
    Serialize value and write it under key, replacing any previous value.
    Raises StorageError if serialization or the write fails.
    """
    try:
        text = dumps(value)
    except (TypeError, ValueError) as e:
        raise StorageError(key, e) from e

    try:
        async with connect() as conn:
            await conn.execute(
                """
                INSERT INTO kv(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                """,
                (key, text),
            )
            await conn.commit()
    except (sqlite3.Error, OSError) as e:
        raise StorageError(key, e) from e
    _logger.debug(f"Saved '{key}' ({len(text)} bytes)")


async def delete(key: str) -> None:
    """Remove key if present. Raises StorageError on failure."""
    try:
        async with connect() as conn:
            await conn.execute("DELETE FROM kv WHERE key = ?;", (key,))
            await conn.commit()
    except (sqlite3.Error, OSError) as e:
        raise StorageError(key, e) from e
