# src/db/crud.py
# typed access to the persisted collections and session
from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple, TypeVar

from db import models, storage
from utils.logger import get_logger

_logger = get_logger(__name__)

R = TypeVar("R")


def _to_records(key: str, raw: Any, factory: Callable[[dict], R]) -> Tuple[R, ...]:
    """Convert a loaded JSON array into records, skipping malformed entries."""
    if not isinstance(raw, list):
        _logger.warning(f"'{key}' is not a list, ignoring stored value")
        return ()
    records: List[R] = []
    for i, entry in enumerate(raw):
        try:
            records.append(factory(entry))
        except (AttributeError, TypeError, ValueError) as e:
            _logger.warning(f"Skipping malformed entry {i} in '{key}': {e}")
    return tuple(records)


# ---------------------------
# Collections
# ---------------------------


async def load_records() -> models.RecordState:
    """Rebuild all collections; missing keys yield empty collections."""
    manufacturers = await storage.load(storage.MANUFACTURERS_KEY, [])
    customers = await storage.load(storage.CUSTOMERS_KEY, [])
    rfqs = await storage.load(storage.RFQS_KEY, [])
    return models.RecordState(
        manufacturers=_to_records(
            storage.MANUFACTURERS_KEY, manufacturers, models.Manufacturer.from_dict
        ),
        customers=_to_records(
            storage.CUSTOMERS_KEY, customers, models.Customer.from_dict
        ),
        rfqs=_to_records(storage.RFQS_KEY, rfqs, models.RFQ.from_dict),
    )


async def save_manufacturers(state: models.RecordState) -> None:
    await storage.save(storage.MANUFACTURERS_KEY, state.manufacturers)


async def save_customers(state: models.RecordState) -> None:
    await storage.save(storage.CUSTOMERS_KEY, state.customers)


async def save_rfqs(state: models.RecordState) -> None:
    await storage.save(storage.RFQS_KEY, state.rfqs)


async def save_records(state: models.RecordState) -> None:
    """Persist all three collections."""
    await save_manufacturers(state)
    await save_customers(state)
    await save_rfqs(state)


# ---------------------------
# Session
# ---------------------------


async def load_session() -> Optional[models.Session]:
    """Return the persisted session, or None if absent or malformed."""
    raw = await storage.load(storage.AUTH_KEY, None)
    if raw is None:
        return None
    try:
        session = models.Session.from_dict(raw)
    except (AttributeError, TypeError, ValueError) as e:
        _logger.warning(f"Ignoring malformed session: {e}")
        return None
    if session.role not in models.ROLES:
        _logger.warning(f"Ignoring session with unknown role {session.role!r}")
        return None
    return session


async def save_session(session: Optional[models.Session]) -> None:
    """Persist session; None clears it."""
    if session is None:
        await storage.delete(storage.AUTH_KEY)
    else:
        await storage.save(storage.AUTH_KEY, session)
