"""
Events service layer.
Handles the active-event catalog, registrations and organizer-owned CRUD.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from app.careerforge.audit import record_event
from app.careerforge.gateway import Gateway, RecordNotFound

if TYPE_CHECKING:
    from app.careerforge.models import User
    from app.careerforge.modules.events.models import Event, EventRegistration


class RegistrationClosed(ValueError):
    pass


def parse_datetime(s: str | None) -> datetime | None:
    """
    Parse `YYYY-MM-DDTHH:MM` (datetime-local input) or a bare date.
    Event times are stored naive, so input carrying a UTC offset is rejected.
    """
    if not s:
        return None
    s = s.strip()
    if not s:
        return None
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is not None:
        raise ValueError(f"timezone offsets are not accepted: {s!r}")
    return dt


def parse_date(s: str | None) -> date | None:
    """Parse YYYY-MM-DD date string."""
    if not s:
        return None
    s = s.strip()
    if not s:
        return None
    return date.fromisoformat(s)


def validate_event_payload(payload: dict) -> list[str]:
    """Validate event creation/update payload. Returns list of errors."""
    errors = []
    if not (payload.get("title") or "").strip():
        errors.append("Title is required.")
    if not (payload.get("description") or "").strip():
        errors.append("Description is required.")

    start = end = None
    try:
        start = parse_datetime(payload.get("start_date"))
        if start is None:
            errors.append("Start date is required.")
    except ValueError:
        errors.append("Start date is invalid.")
    try:
        end = parse_datetime(payload.get("end_date"))
        if end is None:
            errors.append("End date is required.")
    except ValueError:
        errors.append("End date is invalid.")
    if start and end and end < start:
        errors.append("End date must be after the start date.")

    try:
        parse_date(payload.get("registration_deadline"))
    except ValueError:
        errors.append("Registration deadline is invalid.")

    raw_max = (payload.get("max_participants") or "").strip()
    if raw_max:
        try:
            if int(raw_max) <= 0:
                errors.append("Max participants must be a positive number.")
        except ValueError:
            errors.append("Max participants must be a whole number.")
    return errors


def _event_values(payload: dict) -> dict:
    raw_max = (payload.get("max_participants") or "").strip()
    return {
        "title": (payload.get("title") or "").strip(),
        "description": (payload.get("description") or "").strip(),
        "start_date": parse_datetime(payload.get("start_date")),
        "end_date": parse_datetime(payload.get("end_date")),
        "registration_deadline": parse_date(payload.get("registration_deadline")),
        "max_participants": int(raw_max) if raw_max else None,
        "banner_url": (payload.get("banner_url") or "").strip() or None,
        "is_active": bool(payload.get("is_active")),
    }


# ---------- Catalog ----------
def list_active_events(gw: Gateway) -> list["Event"]:
    return gw.select("events", order_by="start_date", is_active=True)


def event_status(event: "Event", now: datetime | None = None) -> str:
    now = now or datetime.now()
    return "Upcoming" if event.start_date > now else "Ongoing"


def registered_event_ids(gw: Gateway, student_id: int) -> set[int]:
    return {r.event_id for r in gw.select("event_registrations", student_id=student_id)}


def registration_closed_reason(gw: Gateway, event: "Event", today: date | None = None) -> str | None:
    today = today or date.today()
    if not event.is_active:
        return "This event is no longer active."
    if event.registration_deadline and event.registration_deadline < today:
        return "Registration deadline has passed."
    if event.max_participants and gw.count("event_registrations", event_id=event.id) >= event.max_participants:
        return "This event is full."
    return None


def register_student(gw: Gateway, event: "Event", user: "User", today: date | None = None) -> "EventRegistration":
    reason = registration_closed_reason(gw, event, today)
    if reason:
        raise RegistrationClosed(reason)
    registration = gw.insert("event_registrations", {"event_id": event.id, "student_id": user.id})
    record_event(
        gw.s,
        actor=user,
        action="event.register",
        entity_type="Event",
        entity_id=str(event.id),
        metadata={"title": event.title},
    )
    return registration


# ---------- Organizer CRUD ----------
def list_owned_events(gw: Gateway, organizer_id: int) -> list["Event"]:
    return gw.select("events", order_by="created_at", descending=True, organizer_id=organizer_id)


def get_owned_event(gw: Gateway, event_id: int, user: "User") -> "Event":
    event = gw.get("events", event_id)
    if event.organizer_id != user.id:
        raise RecordNotFound(f"events: {event_id} not owned by user {user.id}")
    return event


def create_event(gw: Gateway, payload: dict, user: "User") -> "Event":
    now = datetime.utcnow()
    event = gw.insert(
        "events",
        {**_event_values(payload), "organizer_id": user.id, "created_at": now, "updated_at": now},
    )
    record_event(
        gw.s,
        actor=user,
        action="event.create",
        entity_type="Event",
        entity_id=str(event.id),
        metadata={"title": event.title},
    )
    return event


def update_event(gw: Gateway, event: "Event", payload: dict, user: "User") -> "Event":
    values = _event_values(payload)
    changes = {k: {"old": getattr(event, k), "new": v} for k, v in values.items() if getattr(event, k) != v}
    event = gw.update("events", event.id, {**values, "updated_at": datetime.utcnow()})
    record_event(
        gw.s,
        actor=user,
        action="event.edit",
        entity_type="Event",
        entity_id=str(event.id),
        metadata={"title": event.title, "changes": changes},
    )
    return event


def delete_event(gw: Gateway, event: "Event", user: "User") -> None:
    event_id, title = event.id, event.title
    gw.delete("events", event_id)
    record_event(
        gw.s,
        actor=user,
        action="event.delete",
        entity_type="Event",
        entity_id=str(event_id),
        metadata={"title": title},
    )
