# provide dataclass models
# attribute names match the persisted JSON keys

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple

# status values are listed in transition order
MANUFACTURER_STATUSES = ("Application Submitted", "Under Review", "Approved")
CUSTOMER_STATUSES = ("Application Submitted", "Pending", "Approved")
RFQ_STATUSES = ("New", "Quote Waiting", "Awaiting Payment")

MEMBERSHIPS = ("Basic", "Moderate", "Advanced")
ROLES = ("admin", "manufacturer", "customer")


def _pick(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only keys that are fields of cls; unknown keys are dropped."""
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    qty: int
    lead: int  # days
    price: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Product:
        return cls(**_pick(cls, data))


@dataclass(frozen=True)
class Manufacturer:
    id: str
    company: str
    country: str
    email: str
    registrationNumber: str = ""
    contact: str = ""
    phone: str = ""
    ncage: str = ""
    membership: str = "Basic"
    profile: str = ""
    products: Tuple[Product, ...] = ()
    status: str = MANUFACTURER_STATUSES[0]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Manufacturer:
        kwargs = _pick(cls, data)
        kwargs["products"] = tuple(
            Product.from_dict(p) for p in kwargs.get("products") or ()
        )
        return cls(**kwargs)


@dataclass(frozen=True)
class Customer:
    id: str
    company: str
    country: str
    email: str
    registrationNumber: str = ""
    contact: str = ""
    phone: str = ""
    status: str = CUSTOMER_STATUSES[0]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Customer:
        return cls(**_pick(cls, data))


@dataclass(frozen=True)
class Quote:
    id: str
    manufacturerId: str
    price: float
    lead: int  # days
    notes: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Quote:
        return cls(**_pick(cls, data))


@dataclass(frozen=True)
class RFQ:
    id: str
    customerId: str  # weak reference, lookup only
    part: str
    qty: int
    delivery: str = ""
    notes: str = ""
    status: str = RFQ_STATUSES[0]
    quotes: Tuple[Quote, ...] = ()
    acceptedQuoteId: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RFQ:
        kwargs = _pick(cls, data)
        kwargs["quotes"] = tuple(Quote.from_dict(q) for q in kwargs.get("quotes") or ())
        return cls(**kwargs)


@dataclass(frozen=True)
class Session:
    role: str  # one of ROLES
    id: Optional[str]  # None for admin
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Session:
        return cls(**_pick(cls, data))


@dataclass(frozen=True)
class RecordState:
    """Snapshot of all collections, most recent record first."""

    manufacturers: Tuple[Manufacturer, ...] = field(default_factory=tuple)
    customers: Tuple[Customer, ...] = field(default_factory=tuple)
    rfqs: Tuple[RFQ, ...] = field(default_factory=tuple)
