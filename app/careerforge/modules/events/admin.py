from __future__ import annotations

from datetime import date, datetime

from flask import Blueprint, flash, redirect, render_template, request, url_for

from app.careerforge.auth import current_context
from app.careerforge.constants import ROLE_RECRUITER
from app.careerforge.db import db_session
from app.careerforge.gateway import Gateway, RecordNotFound, WriteRejected
from app.careerforge.modules.events.service import (
    RegistrationClosed,
    create_event,
    delete_event,
    event_status,
    get_owned_event,
    list_active_events,
    list_owned_events,
    register_student,
    registered_event_ids,
    update_event,
    validate_event_payload,
)
from app.careerforge.modules.internships.service import list_owned_internships
from app.careerforge.rbac import require_role

bp = Blueprint("events", __name__)


def _event_payload() -> dict:
    return {
        "title": request.form.get("title"),
        "description": request.form.get("description"),
        "start_date": request.form.get("start_date"),
        "end_date": request.form.get("end_date"),
        "registration_deadline": request.form.get("registration_deadline"),
        "max_participants": request.form.get("max_participants"),
        "banner_url": request.form.get("banner_url"),
        "is_active": request.form.get("is_active"),
    }


# ---------- Catalog ----------
@bp.get("/events")
def events_list():
    gw = Gateway(db_session())
    ctx = current_context()
    events = list_active_events(gw)
    registered = registered_event_ids(gw, ctx.user.id) if ctx.is_authenticated else set()
    now = datetime.now()
    return render_template(
        "events/list.html",
        events=events,
        registered=registered,
        statuses={e.id: event_status(e, now) for e in events},
    )


@bp.post("/events/<int:event_id>/register")
def event_register(event_id: int):
    ctx = current_context()
    if not ctx.is_authenticated:
        flash("Please sign in to register", "danger")
        return redirect(url_for("auth.login_get", next=url_for("events.events_list")))

    s = db_session()
    gw = Gateway(s)
    try:
        event = gw.get("events", event_id)
        register_student(gw, event, ctx.user)
        s.commit()
    except RecordNotFound:
        flash("Event not found", "danger")
        return redirect(url_for("events.events_list"))
    except RegistrationClosed as e:
        flash(str(e), "danger")
        return redirect(url_for("events.events_list"))
    except WriteRejected:
        flash("Failed to register for event", "danger")
        return redirect(url_for("events.events_list"))

    flash("Successfully registered!", "success")
    return redirect(url_for("events.events_list"))


# ---------- Manage (recruiters) ----------
@bp.get("/manage-events")
@require_role(ROLE_RECRUITER)
def manage_list():
    gw = Gateway(db_session())
    user_id = current_context().user.id
    tab = (request.args.get("tab") or "events").strip()
    return render_template(
        "events/manage.html",
        events=list_owned_events(gw, user_id),
        internships=list_owned_internships(gw, user_id),
        tab=tab if tab in ("events", "internships") else "events",
        today=date.today(),
    )


@bp.post("/manage-events/events/new")
@require_role(ROLE_RECRUITER)
def manage_new_post():
    s = db_session()
    u = current_context().user

    payload = _event_payload()
    errors = validate_event_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("events.manage_list"))

    try:
        create_event(Gateway(s), payload, u)
        s.commit()
    except WriteRejected:
        flash("Failed to create event", "danger")
        return redirect(url_for("events.manage_list"))

    flash("Event created successfully", "success")
    return redirect(url_for("events.manage_list"))


@bp.get("/manage-events/events/<int:event_id>/edit")
@require_role(ROLE_RECRUITER)
def manage_edit_get(event_id: int):
    gw = Gateway(db_session())
    try:
        event = get_owned_event(gw, event_id, current_context().user)
    except RecordNotFound:
        flash("Event not found", "danger")
        return redirect(url_for("events.manage_list"))
    return render_template("events/edit.html", event=event)


@bp.post("/manage-events/events/<int:event_id>/edit")
@require_role(ROLE_RECRUITER)
def manage_edit_post(event_id: int):
    s = db_session()
    gw = Gateway(s)
    u = current_context().user
    try:
        event = get_owned_event(gw, event_id, u)
    except RecordNotFound:
        flash("Event not found", "danger")
        return redirect(url_for("events.manage_list"))

    payload = _event_payload()
    errors = validate_event_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("events.manage_edit_get", event_id=event_id))

    try:
        update_event(gw, event, payload, u)
        s.commit()
    except WriteRejected:
        flash("Failed to update event", "danger")
        return redirect(url_for("events.manage_edit_get", event_id=event_id))

    flash("Event updated successfully", "success")
    return redirect(url_for("events.manage_list"))


@bp.post("/manage-events/events/<int:event_id>/delete")
@require_role(ROLE_RECRUITER)
def manage_delete_post(event_id: int):
    s = db_session()
    gw = Gateway(s)
    u = current_context().user
    try:
        event = get_owned_event(gw, event_id, u)
        delete_event(gw, event, u)
        s.commit()
    except RecordNotFound:
        flash("Event not found", "danger")
        return redirect(url_for("events.manage_list"))
    except WriteRejected:
        flash("Failed to delete event", "danger")
        return redirect(url_for("events.manage_list"))

    flash("Event deleted successfully", "success")
    return redirect(url_for("events.manage_list"))
