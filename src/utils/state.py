from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, Optional

import db.crud as crud
import db.ops as ops
from db.errors import IdentityNotFoundError, StorageError, ValidationError
from db.models import (
    RFQ,
    ROLES,
    Customer,
    Manufacturer,
    Product,
    Quote,
    RecordState,
    Session,
)
from utils.logger import get_logger
from utils.pure import find_by_id

_logger = get_logger(__name__)

Saver = Callable[[RecordState], Awaitable[None]]

ADMIN_NAME = "Platform Admin"


@dataclass
class GlobalState:
    """
    Centralized application state shared by screens.

    Fields:
      - records: manufacturers, customers and RFQs currently in memory
      - session: who is logged in, None before login
      - last_storage_error: set when the latest operation could not be
        persisted; the in-memory change is kept regardless

    Every mutation goes through one of the async methods below, which compute
    the next state with db.ops and then write the touched collections.
    """

    records: RecordState = field(default_factory=RecordState)
    session: Optional[Session] = None
    last_storage_error: Optional[StorageError] = None
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def role(self) -> Optional[str]:
        return self.session.role if self.session else None

    @property
    def uid(self) -> Optional[str]:
        return self.session.id if self.session else None

    async def load(self) -> None:
        """Rebuild records and session from storage."""
        async with self._lock:
            self.records = await crud.load_records()
            self.session = await crud.load_session()
            if self.session and not self._session_record_exists():
                _logger.warning(
                    f"Saved {self.session.role} session {self.session.id} has no "
                    "matching record, login required"
                )
                self.session = None
        _logger.info(
            f"Loaded {len(self.records.manufacturers)} manufacturers, "
            f"{len(self.records.customers)} customers, {len(self.records.rfqs)} RFQs"
        )

    def _session_record_exists(self) -> bool:
        if self.session.role == "admin":
            return True
        if self.session.role == "manufacturer":
            coll = self.records.manufacturers
        else:
            coll = self.records.customers
        return find_by_id(coll, self.session.id) is not None

    async def _persist(self, savers: Iterable[Saver]) -> None:
        for saver in savers:
            try:
                await saver(self.records)
            except StorageError as e:
                _logger.error(f"Persist failed, keeping in-memory state: {e}")
                self.last_storage_error = e

    async def _apply(
        self,
        op: Callable[..., Any],
        savers: List[Saver] | Callable[[Any], List[Saver]],
        *args,
    ):
        async with self._lock:
            self.last_storage_error = None
            self.records, rec = op(self.records, *args)
            if callable(savers):
                # pick the savers from the record the operation touched
                savers = savers(rec)
            await self._persist(savers)
            return rec

    # ---------------------------
    # Registration & approval
    # ---------------------------

    async def register_manufacturer(self, data: Mapping[str, Any]) -> Manufacturer:
        rec = await self._apply(
            ops.register_manufacturer, [crud.save_manufacturers], data
        )
        _logger.info(f"Manufacturer registered: {rec.id} {rec.company}")
        return rec

    async def register_customer(self, data: Mapping[str, Any]) -> Customer:
        rec = await self._apply(ops.register_customer, [crud.save_customers], data)
        _logger.info(f"Customer registered: {rec.id} {rec.company}")
        return rec

    async def approve_manufacturer(self, manufacturer_id: str) -> Manufacturer:
        return await self._apply(
            ops.approve_manufacturer, [crud.save_manufacturers], manufacturer_id
        )

    async def approve_customer(self, customer_id: str) -> Customer:
        return await self._apply(
            ops.approve_customer, [crud.save_customers], customer_id
        )

    async def review_manufacturer(self, manufacturer_id: str) -> Manufacturer:
        return await self._apply(
            ops.review_manufacturer, [crud.save_manufacturers], manufacturer_id
        )

    async def review_customer(self, customer_id: str) -> Customer:
        return await self._apply(ops.review_customer, [crud.save_customers], customer_id)

    # ---------------------------
    # Profile, products, RFQs
    # ---------------------------

    async def update_profile(
        self, record_id: str, patch: Mapping[str, Any]
    ) -> Manufacturer | Customer:
        return await self._apply(
            ops.update_profile,
            lambda rec: [
                crud.save_manufacturers
                if isinstance(rec, Manufacturer)
                else crud.save_customers
            ],
            record_id,
            patch,
        )

    async def add_product(
        self, manufacturer_id: str, product: Mapping[str, Any]
    ) -> Product:
        return await self._apply(
            ops.add_product, [crud.save_manufacturers], manufacturer_id, product
        )

    async def create_rfq(self, rfq: Mapping[str, Any]) -> RFQ:
        rec = await self._apply(ops.create_rfq, [crud.save_rfqs], rfq)
        _logger.info(f"RFQ {rec.id} created by {rec.customerId}: {rec.part}")
        return rec

    async def submit_quote(
        self, rfq_id: str, manufacturer_id: str, quote: Mapping[str, Any]
    ) -> Quote:
        return await self._apply(
            ops.submit_quote, [crud.save_rfqs], rfq_id, manufacturer_id, quote
        )

    async def accept_quote(self, rfq_id: str, quote_id: str) -> RFQ:
        return await self._apply(ops.accept_quote, [crud.save_rfqs], rfq_id, quote_id)

    # ---------------------------
    # Session
    # ---------------------------

    async def login(self, role: str, identifier: str = "") -> Session:
        """
        Select a role. Manufacturers and customers are looked up by email
        (case-insensitive) or id; admin needs no identifier.
        Raises IdentityNotFoundError and leaves the session untouched on no match.
        """
        if role not in ROLES:
            raise ValidationError(f"unknown role {role!r}", "role")

        if role == "admin":
            session = Session(role="admin", id=None, name=ADMIN_NAME)
        else:
            ident = (identifier or "").strip()
            if not ident:
                raise ValidationError("email or id is required", "identifier")
            coll = (
                self.records.manufacturers
                if role == "manufacturer"
                else self.records.customers
            )
            rec = next(
                (
                    r
                    for r in coll
                    if r.id == ident or r.email.lower() == ident.lower()
                ),
                None,
            )
            if rec is None:
                raise IdentityNotFoundError(role, ident)
            session = Session(role=role, id=rec.id, name=rec.company)

        async with self._lock:
            self.last_storage_error = None
            self.session = session
            await self._persist([lambda _: crud.save_session(session)])
        _logger.info(f"Logged in as {session.role} {session.id or ''}".rstrip())
        return session

    async def logout(self) -> None:
        async with self._lock:
            self.last_storage_error = None
            self.session = None
            await self._persist([lambda _: crud.save_session(None)])

    # ---------------------------
    # Reads
    # ---------------------------

    def current_manufacturer(self) -> Optional[Manufacturer]:
        if self.role != "manufacturer":
            return None
        return find_by_id(self.records.manufacturers, self.uid)

    def current_customer(self) -> Optional[Customer]:
        if self.role != "customer":
            return None
        return find_by_id(self.records.customers, self.uid)

    def manufacturer(self, manufacturer_id: str) -> Optional[Manufacturer]:
        return find_by_id(self.records.manufacturers, manufacturer_id)

    def customer(self, customer_id: str) -> Optional[Customer]:
        return find_by_id(self.records.customers, customer_id)

    def rfq(self, rfq_id: str) -> Optional[RFQ]:
        return find_by_id(self.records.rfqs, rfq_id)

    def rfqs_for_customer(self, customer_id: str) -> List[RFQ]:
        return [r for r in self.records.rfqs if r.customerId == customer_id]

    def open_rfqs(self) -> List[RFQ]:
        """RFQs that can still receive quotes."""
        return [r for r in self.records.rfqs if r.acceptedQuoteId is None]
