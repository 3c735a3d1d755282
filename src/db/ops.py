# pure domain operations: (state, payload) -> (new state, affected record)
# nothing here touches storage; utils.state persists the result
from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Mapping, Sequence, Tuple

from db.errors import NotFoundError, ValidationError
from db.models import (
    CUSTOMER_STATUSES,
    MANUFACTURER_STATUSES,
    MEMBERSHIPS,
    RFQ,
    RFQ_STATUSES,
    Customer,
    Manufacturer,
    Product,
    Quote,
    RecordState,
)
from utils.pure import find_by_id, new_id, update_by_id

APPROVED = "Approved"

REQUIRED_PARTY_FIELDS = ("company", "country", "email")
MANUFACTURER_EDITABLE = (
    "company",
    "country",
    "registrationNumber",
    "contact",
    "email",
    "phone",
    "ncage",
    "membership",
    "profile",
)
CUSTOMER_EDITABLE = (
    "company",
    "country",
    "registrationNumber",
    "contact",
    "email",
    "phone",
)


# ---------------------------
# Payload coercion
# ---------------------------


def _text(data: Mapping[str, Any], name: str) -> str:
    val = data.get(name)
    if val is None:
        return ""
    if not isinstance(val, (str, int, float)) or isinstance(val, bool):
        raise ValidationError(f"{name} must be text", name)
    return str(val).strip()


def _require_text(data: Mapping[str, Any], name: str) -> str:
    val = _text(data, name)
    if not val:
        raise ValidationError(f"{name} is required", name)
    return val


def _to_int(val: Any, name: str, minimum: int = 0) -> int:
    if val is None or (isinstance(val, str) and not val.strip()):
        raise ValidationError(f"{name} is required", name)
    if isinstance(val, bool):
        raise ValidationError(f"{name} must be a whole number", name)
    try:
        num = val if isinstance(val, int) else int(str(val).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a whole number", name) from None
    if num < minimum:
        raise ValidationError(f"{name} must be at least {minimum}", name)
    return num


def _to_float(val: Any, name: str) -> float:
    if val is None or (isinstance(val, str) and not val.strip()):
        raise ValidationError(f"{name} is required", name)
    if isinstance(val, bool):
        raise ValidationError(f"{name} must be a number", name)
    try:
        num = float(str(val).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number", name) from None
    if not math.isfinite(num) or num < 0:
        raise ValidationError(f"{name} must be a non-negative number", name)
    return num


def _membership(val: str) -> str:
    val = val or MEMBERSHIPS[0]
    if val not in MEMBERSHIPS:
        raise ValidationError(
            f"membership must be one of {', '.join(MEMBERSHIPS)}", "membership"
        )
    return val


def _advance(current: str, target: str, order: Sequence[str]) -> str:
    """Return target if it lies after current in order, otherwise current."""
    rank = order.index(current) if current in order else -1
    return target if order.index(target) > rank else current


# ---------------------------
# Registration & approval
# ---------------------------


def register_manufacturer(
    state: RecordState, data: Mapping[str, Any]
) -> Tuple[RecordState, Manufacturer]:
    company, country, email = (_require_text(data, f) for f in REQUIRED_PARTY_FIELDS)
    rec = Manufacturer(
        id=new_id("m"),
        company=company,
        country=country,
        email=email,
        registrationNumber=_text(data, "registrationNumber"),
        contact=_text(data, "contact"),
        phone=_text(data, "phone"),
        ncage=_text(data, "ncage"),
        membership=_membership(_text(data, "membership")),
        profile=_text(data, "profile"),
        products=(),
        status=MANUFACTURER_STATUSES[0],
    )
    return replace(state, manufacturers=(rec,) + state.manufacturers), rec


def register_customer(
    state: RecordState, data: Mapping[str, Any]
) -> Tuple[RecordState, Customer]:
    company, country, email = (_require_text(data, f) for f in REQUIRED_PARTY_FIELDS)
    rec = Customer(
        id=new_id("c"),
        company=company,
        country=country,
        email=email,
        registrationNumber=_text(data, "registrationNumber"),
        contact=_text(data, "contact"),
        phone=_text(data, "phone"),
        status=CUSTOMER_STATUSES[0],
    )
    return replace(state, customers=(rec,) + state.customers), rec


def _move_status(
    state: RecordState,
    attr: str,
    kind: str,
    record_id: str,
    target: str,
    order: Sequence[str],
):
    coll = getattr(state, attr)
    rec = find_by_id(coll, record_id)
    if rec is None:
        raise NotFoundError(kind, record_id)
    status = _advance(rec.status, target, order)
    if status == rec.status:
        return state, rec
    coll, _ = update_by_id(coll, record_id, {"status": status})
    return replace(state, **{attr: coll}), find_by_id(coll, record_id)


def approve_manufacturer(
    state: RecordState, manufacturer_id: str
) -> Tuple[RecordState, Manufacturer]:
    return _move_status(
        state,
        "manufacturers",
        "manufacturer",
        manufacturer_id,
        APPROVED,
        MANUFACTURER_STATUSES,
    )


def approve_customer(
    state: RecordState, customer_id: str
) -> Tuple[RecordState, Customer]:
    return _move_status(
        state, "customers", "customer", customer_id, APPROVED, CUSTOMER_STATUSES
    )


def review_manufacturer(
    state: RecordState, manufacturer_id: str
) -> Tuple[RecordState, Manufacturer]:
    """Application Submitted -> Under Review; later statuses are kept."""
    return _move_status(
        state,
        "manufacturers",
        "manufacturer",
        manufacturer_id,
        MANUFACTURER_STATUSES[1],
        MANUFACTURER_STATUSES,
    )


def review_customer(
    state: RecordState, customer_id: str
) -> Tuple[RecordState, Customer]:
    """Application Submitted -> Pending; later statuses are kept."""
    return _move_status(
        state,
        "customers",
        "customer",
        customer_id,
        CUSTOMER_STATUSES[1],
        CUSTOMER_STATUSES,
    )


# ---------------------------
# Profile & products
# ---------------------------


def update_profile(
    state: RecordState, record_id: str, patch: Mapping[str, Any]
) -> Tuple[RecordState, Manufacturer | Customer]:
    """
    Shallow-merge patch into the manufacturer or customer with record_id.
    Manufacturers are searched first. Only contact/registration fields are
    editable; required fields cannot be blanked.
    """
    if find_by_id(state.manufacturers, record_id) is not None:
        attr, editable = "manufacturers", MANUFACTURER_EDITABLE
    elif find_by_id(state.customers, record_id) is not None:
        attr, editable = "customers", CUSTOMER_EDITABLE
    else:
        raise NotFoundError("record", record_id)

    clean = {}
    for name in patch:
        if name not in editable:
            raise ValidationError(f"{name} cannot be edited", name)
        if name in REQUIRED_PARTY_FIELDS:
            clean[name] = _require_text(patch, name)
        elif name == "membership":
            clean[name] = _membership(_require_text(patch, name))
        else:
            clean[name] = _text(patch, name)

    coll, found = update_by_id(getattr(state, attr), record_id, clean)
    if not found:
        raise NotFoundError("record", record_id)
    return replace(state, **{attr: coll}), find_by_id(coll, record_id)


def add_product(
    state: RecordState, manufacturer_id: str, product: Mapping[str, Any]
) -> Tuple[RecordState, Product]:
    mfr = find_by_id(state.manufacturers, manufacturer_id)
    if mfr is None:
        raise NotFoundError("manufacturer", manufacturer_id)
    prod = Product(
        id=new_id("p"),
        name=_require_text(product, "name"),
        qty=_to_int(product.get("qty"), "qty"),
        lead=_to_int(product.get("lead"), "lead"),
        price=_to_float(product.get("price"), "price"),
    )
    coll, found = update_by_id(
        state.manufacturers, manufacturer_id, {"products": mfr.products + (prod,)}
    )
    if not found:
        raise NotFoundError("manufacturer", manufacturer_id)
    return replace(state, manufacturers=coll), prod


# ---------------------------
# RFQs & quotes
# ---------------------------


def create_rfq(
    state: RecordState, rfq: Mapping[str, Any]
) -> Tuple[RecordState, RFQ]:
    """status and quotes in the payload are ignored."""
    customer_id = _require_text(rfq, "customerId")
    if find_by_id(state.customers, customer_id) is None:
        raise NotFoundError("customer", customer_id)
    rec = RFQ(
        id=new_id("r"),
        customerId=customer_id,
        part=_require_text(rfq, "part"),
        qty=_to_int(rfq.get("qty"), "qty", minimum=1),
        delivery=_text(rfq, "delivery"),
        notes=_text(rfq, "notes"),
        status=RFQ_STATUSES[0],
        quotes=(),
    )
    return replace(state, rfqs=(rec,) + state.rfqs), rec


def submit_quote(
    state: RecordState,
    rfq_id: str,
    manufacturer_id: str,
    quote: Mapping[str, Any],
) -> Tuple[RecordState, Quote]:
    rfq = find_by_id(state.rfqs, rfq_id)
    if rfq is None:
        raise NotFoundError("rfq", rfq_id)
    mfr = find_by_id(state.manufacturers, manufacturer_id)
    if mfr is None:
        raise NotFoundError("manufacturer", manufacturer_id)
    if mfr.status != APPROVED:
        raise ValidationError("only approved manufacturers can quote", "status")
    if rfq.acceptedQuoteId is not None:
        raise ValidationError("RFQ already has an accepted quote", "status")

    q = Quote(
        id=new_id("q"),
        manufacturerId=manufacturer_id,
        price=_to_float(quote.get("price"), "price"),
        lead=_to_int(quote.get("lead"), "lead"),
        notes=_text(quote, "notes"),
    )
    coll, _ = update_by_id(
        state.rfqs,
        rfq_id,
        {
            "quotes": rfq.quotes + (q,),
            "status": _advance(rfq.status, RFQ_STATUSES[1], RFQ_STATUSES),
        },
    )
    return replace(state, rfqs=coll), q


def accept_quote(
    state: RecordState, rfq_id: str, quote_id: str
) -> Tuple[RecordState, RFQ]:
    rfq = find_by_id(state.rfqs, rfq_id)
    if rfq is None:
        raise NotFoundError("rfq", rfq_id)
    if find_by_id(rfq.quotes, quote_id) is None:
        raise NotFoundError("quote", quote_id)
    if rfq.acceptedQuoteId == quote_id:
        return state, rfq
    if rfq.acceptedQuoteId is not None:
        raise ValidationError("RFQ already has an accepted quote", "status")

    coll, _ = update_by_id(
        state.rfqs,
        rfq_id,
        {
            "acceptedQuoteId": quote_id,
            "status": _advance(rfq.status, RFQ_STATUSES[2], RFQ_STATUSES),
        },
    )
    return replace(state, rfqs=coll), find_by_id(coll, rfq_id)
