from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from app.careerforge.audit import record_event
from app.careerforge.gateway import Gateway, RecordNotFound
from app.careerforge.modules.events.service import parse_date

if TYPE_CHECKING:
    from app.careerforge.models import User
    from app.careerforge.modules.internships.models import Internship, InternshipApplication


class ApplicationClosed(ValueError):
    pass


def validate_internship_payload(payload: dict) -> list[str]:
    """Validate internship creation/update payload. Returns list of errors."""
    errors = []
    for key, label in (("title", "Title"), ("company_name", "Company name"), ("description", "Description")):
        if not (payload.get(key) or "").strip():
            errors.append(f"{label} is required.")
    try:
        if parse_date(payload.get("application_deadline")) is None:
            errors.append("Application deadline is required.")
    except ValueError:
        errors.append("Application deadline is invalid.")
    raw = (payload.get("duration_months") or "").strip()
    if raw:
        try:
            if int(raw) <= 0:
                errors.append("Duration (months) must be a positive number.")
        except ValueError:
            errors.append("Duration (months) must be a whole number.")
    return errors


def _internship_values(payload: dict) -> dict:
    raw = (payload.get("duration_months") or "").strip()
    return {
        "title": (payload.get("title") or "").strip(),
        "company_name": (payload.get("company_name") or "").strip(),
        "description": (payload.get("description") or "").strip(),
        "duration_months": int(raw) if raw else None,
        "stipend": (payload.get("stipend") or "").strip() or None,
        "location": (payload.get("location") or "").strip() or None,
        "application_deadline": parse_date(payload.get("application_deadline")),
        "is_active": bool(payload.get("is_active")),
    }


def list_active_internships(gw: Gateway) -> list["Internship"]:
    return gw.select("internships", order_by="created_at", descending=True, is_active=True)


def is_deadline_passed(internship: "Internship", today: date | None = None) -> bool:
    return internship.application_deadline < (today or date.today())


def applied_internship_ids(gw: Gateway, student_id: int) -> set[int]:
    return {a.internship_id for a in gw.select("internship_applications", student_id=student_id)}


def apply_to_internship(
    gw: Gateway,
    internship: "Internship",
    user: "User",
    today: date | None = None,
) -> "InternshipApplication":
    if not internship.is_active or is_deadline_passed(internship, today):
        raise ApplicationClosed("Applications for this internship are closed.")
    application = gw.insert("internship_applications", {"internship_id": internship.id, "student_id": user.id})
    record_event(
        gw.s,
        actor=user,
        action="internship.apply",
        entity_type="Internship",
        entity_id=str(internship.id),
        metadata={"title": internship.title, "company_name": internship.company_name},
    )
    return application


def list_owned_internships(gw: Gateway, recruiter_id: int) -> list["Internship"]:
    return gw.select("internships", order_by="created_at", descending=True, recruiter_id=recruiter_id)


def get_owned_internship(gw: Gateway, internship_id: int, user: "User") -> "Internship":
    internship = gw.get("internships", internship_id)
    if internship.recruiter_id != user.id:
        raise RecordNotFound(f"internships: {internship_id} not owned by user {user.id}")
    return internship


def create_internship(gw: Gateway, payload: dict, user: "User") -> "Internship":
    now = datetime.utcnow()
    internship = gw.insert(
        "internships",
        {**_internship_values(payload), "recruiter_id": user.id, "created_at": now, "updated_at": now},
    )
    record_event(
        gw.s,
        actor=user,
        action="internship.create",
        entity_type="Internship",
        entity_id=str(internship.id),
        metadata={"title": internship.title, "company_name": internship.company_name},
    )
    return internship


def update_internship(gw: Gateway, internship: "Internship", payload: dict, user: "User") -> "Internship":
    values = _internship_values(payload)
    changes = {k: {"old": getattr(internship, k), "new": v} for k, v in values.items() if getattr(internship, k) != v}
    internship = gw.update("internships", internship.id, {**values, "updated_at": datetime.utcnow()})
    record_event(
        gw.s,
        actor=user,
        action="internship.edit",
        entity_type="Internship",
        entity_id=str(internship.id),
        metadata={"title": internship.title, "changes": changes},
    )
    return internship


def delete_internship(gw: Gateway, internship: "Internship", user: "User") -> None:
    internship_id, title = internship.id, internship.title
    gw.delete("internships", internship_id)
    record_event(
        gw.s,
        actor=user,
        action="internship.delete",
        entity_type="Internship",
        entity_id=str(internship_id),
        metadata={"title": title},
    )
