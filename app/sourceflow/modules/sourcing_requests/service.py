from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.sourceflow.models import DEFAULT_STATUSES, Customer, Status
from app.sourceflow.modules.sourcing_requests.models import RequestNote, SourcingRequest

logger = logging.getLogger(__name__)

ITEM_NAME_MIN_LENGTH = 2
DEFAULT_STATUS_ID = DEFAULT_STATUSES[0][0]

# Form fields a request create/update reads.
PAYLOAD_FIELDS = ("item_name", "brand", "budget_gbp", "size", "colour", "status_id", "notes")


class RequestNotFound(LookupError):
    def __init__(self, request_id: int):
        super().__init__(f"Request {request_id} not found.")
        self.request_id = request_id


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str


def payload_from_form(form) -> dict[str, str]:
    return {k: form.get(k) or "" for k in PAYLOAD_FIELDS}


def _clean(value: Any) -> str:
    return str(value or "").strip()


def _parse_budget(raw: Any) -> float | None:
    text = _clean(raw)
    if not text:
        return None
    value = float(text)
    if not math.isfinite(value) or value < 0:
        raise ValueError(text)
    return value


def _parse_status_id(raw: Any) -> int:
    text = _clean(raw)
    if not text:
        return DEFAULT_STATUS_ID
    return int(text)


def validate_request_payload(payload: dict[str, Any], *, known_status_ids: set[int] | None = None) -> list[ValidationError]:
    errs: list[ValidationError] = []
    if len(_clean(payload.get("item_name"))) < ITEM_NAME_MIN_LENGTH:
        errs.append(ValidationError("item_name", "Item name is required."))
    try:
        _parse_budget(payload.get("budget_gbp"))
    except ValueError:
        errs.append(ValidationError("budget_gbp", "Budget must be a number of 0 or more."))
    try:
        status_id = _parse_status_id(payload.get("status_id"))
    except ValueError:
        errs.append(ValidationError("status_id", "Status must be a number."))
    else:
        if known_status_ids is not None and status_id not in known_status_ids:
            errs.append(ValidationError("status_id", "Unknown status."))
    return errs


def _apply_payload(r: SourcingRequest, payload: dict[str, Any]) -> None:
    # Optional text fields are stored as "" rather than NULL when left blank.
    r.status_id = _parse_status_id(payload.get("status_id"))
    r.item_name = _clean(payload.get("item_name"))
    r.brand = _clean(payload.get("brand"))
    r.budget_gbp = _parse_budget(payload.get("budget_gbp"))
    r.size = _clean(payload.get("size"))
    r.colour = _clean(payload.get("colour"))


def list_statuses(s: Session) -> list[Status]:
    return list(s.scalars(select(Status).order_by(Status.status_id.asc())))


def status_ids(s: Session) -> set[int]:
    return set(s.scalars(select(Status.status_id)))


def default_customer(s: Session) -> Customer:
    """Customer new requests are filed under: the lowest id, i.e. the seeded demo customer."""
    c = s.scalars(select(Customer).order_by(Customer.customer_id.asc()).limit(1)).first()
    if c is None:
        raise RuntimeError("No customer exists; run scripts/init_db.py to seed the database.")
    return c


def list_requests(s: Session) -> list[SourcingRequest]:
    return list(s.scalars(select(SourcingRequest).order_by(SourcingRequest.request_id.desc())))


def get_request(s: Session, request_id: int) -> SourcingRequest | None:
    return s.get(SourcingRequest, request_id)


def get_request_or_raise(s: Session, request_id: int) -> SourcingRequest:
    r = get_request(s, request_id)
    if r is None:
        raise RequestNotFound(request_id)
    return r


def list_notes(s: Session, r: SourcingRequest) -> list[RequestNote]:
    return list(
        s.scalars(
            select(RequestNote)
            .where(RequestNote.request_id == r.request_id)
            .order_by(RequestNote.note_id.desc())
        )
    )


def add_request_note(s: Session, r: SourcingRequest, note_text: str) -> RequestNote:
    text = _clean(note_text)
    if not text:
        raise ValueError("Note text is required.")
    n = RequestNote(request_id=r.request_id, note_text=text, created_at=datetime.utcnow())
    s.add(n)
    s.flush()
    logger.info("request_note.create note_id=%s request_id=%s", n.note_id, r.request_id)
    return n


def create_request(s: Session, payload: dict[str, Any], *, customer: Customer) -> SourcingRequest:
    """
    Insert a request for `customer`; a non-blank `notes` value becomes its first note.
    Callers validate first (validate_request_payload); unparseable values raise ValueError here.
    """
    now = datetime.utcnow()
    r = SourcingRequest(customer_id=customer.customer_id, created_at=now, updated_at=now)
    _apply_payload(r, payload)
    s.add(r)
    s.flush()
    logger.info("request.create request_id=%s status_id=%s", r.request_id, r.status_id)

    if _clean(payload.get("notes")):
        add_request_note(s, r, payload["notes"])
    return r


def update_request(s: Session, r: SourcingRequest, payload: dict[str, Any]) -> SourcingRequest:
    before = {"status_id": r.status_id, "item_name": r.item_name, "brand": r.brand, "budget_gbp": r.budget_gbp, "size": r.size, "colour": r.colour}
    _apply_payload(r, payload)
    r.updated_at = datetime.utcnow()
    s.flush()

    fields_changed = [k for k, v in before.items() if getattr(r, k) != v]
    logger.info("request.update request_id=%s fields_changed=%s", r.request_id, ",".join(fields_changed) or "-")

    if _clean(payload.get("notes")):
        add_request_note(s, r, payload["notes"])
    return r


def delete_request(s: Session, r: SourcingRequest) -> None:
    request_id = r.request_id
    note_count = len(r.notes)
    # Notes are deleted ahead of the request through the relationship cascade.
    s.delete(r)
    s.flush()
    logger.info("request.delete request_id=%s notes_deleted=%s", request_id, note_count)
