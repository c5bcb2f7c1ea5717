from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, request, url_for

from app.careerforge.auth import current_context
from app.careerforge.constants import COURSE_DIFFICULTIES, ROLE_EDUCATOR
from app.careerforge.db import db_session
from app.careerforge.gateway import Gateway, RecordNotFound, WriteRejected
from app.careerforge.modules.courses.service import (
    create_course,
    delete_course,
    enroll_student,
    enrolled_course_ids,
    filter_courses,
    get_owned_course,
    get_visible_course,
    is_enrolled,
    list_owned_courses,
    list_published_courses,
    update_course,
    validate_course_payload,
    video_embed_url,
)
from app.careerforge.rbac import require_role
from app.careerforge.security import is_safe_next

bp = Blueprint("courses", __name__)


def _course_payload() -> dict:
    return {
        "title": request.form.get("title"),
        "description": request.form.get("description"),
        "difficulty": request.form.get("difficulty"),
        "duration_hours": request.form.get("duration_hours"),
        "category": request.form.get("category"),
        "thumbnail_url": request.form.get("thumbnail_url"),
        "video_url": request.form.get("video_url"),
        "is_published": request.form.get("is_published"),
        "is_active": request.form.get("is_active"),
    }


# ---------- Catalog ----------
@bp.get("/courses")
def courses_list():
    gw = Gateway(db_session())
    ctx = current_context()

    search = (request.args.get("q") or "").strip()
    difficulty = (request.args.get("difficulty") or "all").strip()

    courses = filter_courses(list_published_courses(gw), search, difficulty)
    enrolled = enrolled_course_ids(gw, ctx.user.id) if ctx.is_authenticated else set()

    return render_template(
        "courses/list.html",
        courses=courses,
        enrolled=enrolled,
        search=search,
        difficulty=difficulty,
        difficulties=COURSE_DIFFICULTIES,
    )


# ---------- Detail ----------
@bp.get("/courses/<int:course_id>")
def course_detail(course_id: int):
    gw = Gateway(db_session())
    ctx = current_context()
    try:
        course = get_visible_course(gw, course_id, ctx.user)
    except RecordNotFound:
        flash("Course not found", "danger")
        return redirect(url_for("courses.courses_list"))

    enrolled = ctx.is_authenticated and is_enrolled(gw, course.id, ctx.user.id)
    return render_template(
        "courses/detail.html",
        course=course,
        instructor=course.educator,
        enrolled=enrolled,
        embed_url=video_embed_url(course.video_url) if enrolled else None,
    )


# ---------- Enroll ----------
@bp.post("/courses/<int:course_id>/enroll")
def course_enroll(course_id: int):
    ctx = current_context()
    if not ctx.is_authenticated:
        flash("Please sign in to enroll", "danger")
        return redirect(url_for("auth.login_get", next=url_for("courses.course_detail", course_id=course_id)))

    gw = Gateway(db_session())
    try:
        course = get_visible_course(gw, course_id, ctx.user)
    except RecordNotFound:
        flash("Course not found", "danger")
        return redirect(url_for("courses.courses_list"))

    nxt = (request.form.get("next") or "").strip()
    back = nxt if is_safe_next(nxt) else url_for("courses.course_detail", course_id=course_id)

    try:
        enroll_student(gw, course, ctx.user)
    except WriteRejected:
        flash("Failed to enroll in course", "danger")
        return redirect(back)

    flash("Successfully enrolled!", "success")
    return redirect(back)


# ---------- Manage (educators) ----------
@bp.get("/manage-courses")
@require_role(ROLE_EDUCATOR)
def manage_list():
    gw = Gateway(db_session())
    courses = list_owned_courses(gw, current_context().user.id)
    return render_template("courses/manage.html", courses=courses, difficulties=COURSE_DIFFICULTIES)


@bp.post("/manage-courses/new")
@require_role(ROLE_EDUCATOR)
def manage_new_post():
    s = db_session()
    u = current_context().user

    payload = _course_payload()
    errors = validate_course_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("courses.manage_list"))

    try:
        create_course(Gateway(s), payload, u)
        s.commit()
    except WriteRejected:
        flash("Failed to create course", "danger")
        return redirect(url_for("courses.manage_list"))

    flash("Course created successfully", "success")
    return redirect(url_for("courses.manage_list"))


@bp.get("/manage-courses/<int:course_id>/edit")
@require_role(ROLE_EDUCATOR)
def manage_edit_get(course_id: int):
    gw = Gateway(db_session())
    try:
        course = get_owned_course(gw, course_id, current_context().user)
    except RecordNotFound:
        flash("Course not found", "danger")
        return redirect(url_for("courses.manage_list"))
    return render_template("courses/edit.html", course=course, difficulties=COURSE_DIFFICULTIES)


@bp.post("/manage-courses/<int:course_id>/edit")
@require_role(ROLE_EDUCATOR)
def manage_edit_post(course_id: int):
    s = db_session()
    gw = Gateway(s)
    u = current_context().user
    try:
        course = get_owned_course(gw, course_id, u)
    except RecordNotFound:
        flash("Course not found", "danger")
        return redirect(url_for("courses.manage_list"))

    payload = _course_payload()
    errors = validate_course_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("courses.manage_edit_get", course_id=course_id))

    try:
        update_course(gw, course, payload, u)
        s.commit()
    except WriteRejected:
        flash("Failed to update course", "danger")
        return redirect(url_for("courses.manage_edit_get", course_id=course_id))

    flash("Course updated successfully", "success")
    return redirect(url_for("courses.manage_list"))


@bp.post("/manage-courses/<int:course_id>/delete")
@require_role(ROLE_EDUCATOR)
def manage_delete_post(course_id: int):
    s = db_session()
    gw = Gateway(s)
    u = current_context().user
    try:
        course = get_owned_course(gw, course_id, u)
        delete_course(gw, course, u)
        s.commit()
    except RecordNotFound:
        flash("Course not found", "danger")
        return redirect(url_for("courses.manage_list"))
    except WriteRejected:
        flash("Failed to delete course", "danger")
        return redirect(url_for("courses.manage_list"))

    flash("Course deleted successfully", "success")
    return redirect(url_for("courses.manage_list"))
