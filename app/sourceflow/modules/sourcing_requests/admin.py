from __future__ import annotations

from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, url_for

from app.sourceflow.db import db_session
from app.sourceflow.modules.sourcing_requests.models import SourcingRequest
from app.sourceflow.modules.sourcing_requests.service import (
    ValidationError,
    add_request_note,
    create_request,
    default_customer,
    delete_request,
    get_request,
    list_notes,
    list_requests,
    list_statuses,
    payload_from_form,
    status_ids,
    update_request,
    validate_request_payload,
)

bp = Blueprint("sourcing_requests", __name__)


def _get_or_404(s, request_id: int) -> SourcingRequest:
    r = get_request(s, request_id)
    if r is None:
        abort(404, description="Request not found.")
    return r


def _values_from_request(r: SourcingRequest) -> dict[str, object]:
    return {
        "item_name": r.item_name,
        "brand": r.brand,
        "budget_gbp": r.budget_gbp,
        "size": r.size,
        "colour": r.colour,
        "status_id": r.status_id,
        "notes": "",
    }


def _render_form(s, *, sourcing_request: SourcingRequest | None, values: dict, errors: list[ValidationError], status: int = 200):
    title = f"Edit Request #{sourcing_request.request_id}" if sourcing_request else "New Request"
    return (
        render_template(
            "requests/form.html",
            title=title,
            sourcing_request=sourcing_request,
            values=values,
            errors=errors,
            error_fields={e.field for e in errors},
            statuses=list_statuses(s),
        ),
        status,
    )


@bp.get("/requests")
def requests_list():
    s = db_session()
    return render_template("requests/list.html", title="Requests", requests=list_requests(s))


@bp.get("/requests/new")
def requests_new_get():
    s = db_session()
    return _render_form(s, sourcing_request=None, values={}, errors=[])


@bp.post("/requests")
def requests_new_post():
    s = db_session()
    payload = payload_from_form(request.form)
    errs = validate_request_payload(payload, known_status_ids=status_ids(s))
    if errs:
        return _render_form(s, sourcing_request=None, values=payload, errors=errs, status=400)
    try:
        r = create_request(s, payload, customer=default_customer(s))
        s.commit()
    except Exception:
        s.rollback()
        raise
    flash("Request created.", "success")
    return redirect(url_for("sourcing_requests.request_detail", request_id=r.request_id))


@bp.get("/requests/<int:request_id>")
def request_detail(request_id: int):
    s = db_session()
    r = _get_or_404(s, request_id)
    return render_template(
        "requests/detail.html",
        title=f"Request #{r.request_id}",
        sourcing_request=r,
        notes=list_notes(s, r),
    )


@bp.get("/requests/<int:request_id>/edit")
def request_edit_get(request_id: int):
    s = db_session()
    r = _get_or_404(s, request_id)
    return _render_form(s, sourcing_request=r, values=_values_from_request(r), errors=[])


@bp.post("/requests/<int:request_id>/update")
def request_update_post(request_id: int):
    s = db_session()
    r = _get_or_404(s, request_id)
    payload = payload_from_form(request.form)
    errs = validate_request_payload(payload, known_status_ids=status_ids(s))
    if errs:
        return _render_form(s, sourcing_request=r, values=payload, errors=errs, status=400)
    try:
        update_request(s, r, payload)
        s.commit()
    except Exception:
        s.rollback()
        raise
    flash("Request updated.", "success")
    return redirect(url_for("sourcing_requests.request_detail", request_id=r.request_id))


@bp.post("/requests/<int:request_id>/notes")
def request_note_add(request_id: int):
    s = db_session()
    r = _get_or_404(s, request_id)
    try:
        add_request_note(s, r, request.form.get("note_text") or "")
        s.commit()
    except ValueError as e:
        s.rollback()
        current_app.logger.info("Rejected note for request_id=%s: %s", r.request_id, e)
        abort(400, description=str(e))
    flash("Note added.", "success")
    return redirect(url_for("sourcing_requests.request_detail", request_id=r.request_id))


@bp.post("/requests/<int:request_id>/delete")
def request_delete_post(request_id: int):
    s = db_session()
    r = _get_or_404(s, request_id)
    try:
        delete_request(s, r)
        s.commit()
    except Exception:
        s.rollback()
        raise
    flash(f"Request #{request_id} deleted.", "success")
    return redirect(url_for("sourcing_requests.requests_list"))
