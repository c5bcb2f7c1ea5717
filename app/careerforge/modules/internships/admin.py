from __future__ import annotations

from datetime import date

from flask import Blueprint, flash, redirect, render_template, request, url_for

from app.careerforge.auth import current_context
from app.careerforge.constants import ROLE_RECRUITER
from app.careerforge.db import db_session
from app.careerforge.gateway import Gateway, RecordNotFound, WriteRejected
from app.careerforge.modules.internships.service import (
    ApplicationClosed,
    applied_internship_ids,
    apply_to_internship,
    create_internship,
    delete_internship,
    get_owned_internship,
    list_active_internships,
    update_internship,
    validate_internship_payload,
)
from app.careerforge.rbac import require_role

bp = Blueprint("internships", __name__)


def _internship_payload() -> dict:
    return {
        "title": request.form.get("title"),
        "company_name": request.form.get("company_name"),
        "description": request.form.get("description"),
        "duration_months": request.form.get("duration_months"),
        "stipend": request.form.get("stipend"),
        "location": request.form.get("location"),
        "application_deadline": request.form.get("application_deadline"),
        "is_active": request.form.get("is_active"),
    }


def _manage_url():
    return url_for("events.manage_list", tab="internships")


@bp.get("/internships")
def internships_list():
    gw = Gateway(db_session())
    ctx = current_context()
    internships = list_active_internships(gw)
    applied = applied_internship_ids(gw, ctx.user.id) if ctx.is_authenticated else set()
    return render_template(
        "internships/list.html",
        internships=internships,
        applied=applied,
        today=date.today(),
    )


@bp.post("/internships/<int:internship_id>/apply")
def internship_apply(internship_id: int):
    ctx = current_context()
    if not ctx.is_authenticated:
        flash("Please sign in to apply", "danger")
        return redirect(url_for("auth.login_get", next=url_for("internships.internships_list")))

    s = db_session()
    gw = Gateway(s)
    try:
        internship = gw.get("internships", internship_id)
        apply_to_internship(gw, internship, ctx.user)
        s.commit()
    except RecordNotFound:
        flash("Internship not found", "danger")
        return redirect(url_for("internships.internships_list"))
    except ApplicationClosed as e:
        flash(str(e), "danger")
        return redirect(url_for("internships.internships_list"))
    except WriteRejected:
        flash("Failed to apply for internship", "danger")
        return redirect(url_for("internships.internships_list"))

    flash("Application submitted successfully!", "success")
    return redirect(url_for("internships.internships_list"))


# ---------- Manage (recruiters; listed on the manage-events page) ----------
@bp.post("/manage-events/internships/new")
@require_role(ROLE_RECRUITER)
def manage_new_post():
    s = db_session()
    u = current_context().user

    payload = _internship_payload()
    errors = validate_internship_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(_manage_url())

    try:
        create_internship(Gateway(s), payload, u)
        s.commit()
    except WriteRejected:
        flash("Failed to create internship", "danger")
        return redirect(_manage_url())

    flash("Internship created successfully", "success")
    return redirect(_manage_url())


@bp.get("/manage-events/internships/<int:internship_id>/edit")
@require_role(ROLE_RECRUITER)
def manage_edit_get(internship_id: int):
    gw = Gateway(db_session())
    try:
        internship = get_owned_internship(gw, internship_id, current_context().user)
    except RecordNotFound:
        flash("Internship not found", "danger")
        return redirect(_manage_url())
    return render_template("internships/edit.html", internship=internship)


@bp.post("/manage-events/internships/<int:internship_id>/edit")
@require_role(ROLE_RECRUITER)
def manage_edit_post(internship_id: int):
    s = db_session()
    gw = Gateway(s)
    u = current_context().user
    try:
        internship = get_owned_internship(gw, internship_id, u)
    except RecordNotFound:
        flash("Internship not found", "danger")
        return redirect(_manage_url())

    payload = _internship_payload()
    errors = validate_internship_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("internships.manage_edit_get", internship_id=internship_id))

    try:
        update_internship(gw, internship, payload, u)
        s.commit()
    except WriteRejected:
        flash("Failed to update internship", "danger")
        return redirect(url_for("internships.manage_edit_get", internship_id=internship_id))

    flash("Internship updated successfully", "success")
    return redirect(_manage_url())


@bp.post("/manage-events/internships/<int:internship_id>/delete")
@require_role(ROLE_RECRUITER)
def manage_delete_post(internship_id: int):
    s = db_session()
    gw = Gateway(s)
    u = current_context().user
    try:
        internship = get_owned_internship(gw, internship_id, u)
        delete_internship(gw, internship, u)
        s.commit()
    except RecordNotFound:
        flash("Internship not found", "danger")
        return redirect(_manage_url())
    except WriteRejected:
        flash("Failed to delete internship", "danger")
        return redirect(_manage_url())

    flash("Internship deleted successfully", "success")
    return redirect(_manage_url())
