"""
Courses service layer.
Handles catalog queries, educator-owned CRUD, enrollment (with the streak side effect) and video embedding.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING

from app.careerforge.audit import record_event
from app.careerforge.constants import COURSE_DIFFICULTIES
from app.careerforge.gateway import Gateway, RecordNotFound
from app.careerforge.modules.streaks.engine import StreakRecord
from app.careerforge.modules.streaks.service import record_activity

if TYPE_CHECKING:
    from app.careerforge.models import User
    from app.careerforge.modules.courses.models import Course, CourseEnrollment

logger = logging.getLogger(__name__)


def parse_int(s: str | None) -> int | None:
    if s is None:
        return None
    s = str(s).strip()
    if not s:
        return None
    return int(s)


def _clean(value: str | None) -> str | None:
    return (value or "").strip() or None


def validate_course_payload(payload: dict) -> list[str]:
    """Validate course creation/update payload. Returns list of errors."""
    errors = []
    if not (payload.get("title") or "").strip():
        errors.append("Title is required.")
    if not (payload.get("description") or "").strip():
        errors.append("Description is required.")
    try:
        hours = parse_int(payload.get("duration_hours"))
        if hours is None:
            errors.append("Duration (hours) is required.")
        elif hours <= 0:
            errors.append("Duration (hours) must be a positive number.")
    except ValueError:
        errors.append("Duration (hours) must be a whole number.")
    difficulty = (payload.get("difficulty") or "").strip()
    if difficulty and difficulty not in COURSE_DIFFICULTIES:
        errors.append(f"Invalid difficulty. Must be one of: {', '.join(COURSE_DIFFICULTIES)}")
    return errors


def _course_values(payload: dict) -> dict:
    return {
        "title": (payload.get("title") or "").strip(),
        "description": (payload.get("description") or "").strip(),
        "difficulty": (payload.get("difficulty") or "beginner").strip(),
        "duration_hours": parse_int(payload.get("duration_hours")),
        "category": _clean(payload.get("category")),
        "thumbnail_url": _clean(payload.get("thumbnail_url")),
        "video_url": _clean(payload.get("video_url")),
        "is_published": bool(payload.get("is_published")),
        "is_active": bool(payload.get("is_active")),
    }


# ---------- Catalog ----------
def list_published_courses(gw: Gateway) -> list["Course"]:
    return gw.select("courses", order_by="created_at", descending=True, is_published=True, is_active=True)


def filter_courses(courses: list["Course"], search: str = "", difficulty: str = "all") -> list["Course"]:
    """Case-insensitive title/description match plus optional difficulty."""
    needle = (search or "").strip().lower()
    out = []
    for c in courses:
        if needle and needle not in c.title.lower() and needle not in (c.description or "").lower():
            continue
        if difficulty and difficulty != "all" and c.difficulty != difficulty:
            continue
        out.append(c)
    return out


def get_visible_course(gw: Gateway, course_id: int, user: "User | None") -> "Course":
    """Drafts and deactivated courses are only visible to their owner; everyone else gets RecordNotFound."""
    course = gw.get("courses", course_id)
    if course.is_published and course.is_active:
        return course
    if user is not None and course.educator_id == user.id:
        return course
    raise RecordNotFound(f"courses: {course_id} is not visible")


def enrolled_course_ids(gw: Gateway, student_id: int) -> set[int]:
    return {e.course_id for e in gw.select("course_enrollments", student_id=student_id)}


def is_enrolled(gw: Gateway, course_id: int, student_id: int) -> bool:
    return gw.count("course_enrollments", course_id=course_id, student_id=student_id) > 0


# ---------- Enrollment ----------
def enroll_student(
    gw: Gateway,
    course: "Course",
    user: "User",
    today: date | None = None,
) -> tuple["CourseEnrollment", StreakRecord | None]:
    """
    Enroll `user` in `course` and then advance their streak.

    The enrollment is committed on its own. The streak update is a second,
    independent write: if it fails it is logged and rolled back, and the
    enrollment stands. WriteRejected from the enrollment itself propagates.
    """
    enrollment = gw.insert("course_enrollments", {"course_id": course.id, "student_id": user.id})
    record_event(
        gw.s,
        actor=user,
        action="course.enroll",
        entity_type="Course",
        entity_id=str(course.id),
        metadata={"title": course.title},
    )
    gw.s.commit()

    try:
        streak = record_activity(gw, user.id, today=today)
        gw.s.commit()
    except Exception as e:
        gw.s.rollback()
        logger.warning("Streak update failed after enrollment (user_id=%s course_id=%s): %s", user.id, course.id, e)
        streak = None
    return enrollment, streak


# ---------- Educator CRUD ----------
def list_owned_courses(gw: Gateway, educator_id: int) -> list["Course"]:
    return gw.select("courses", order_by="created_at", descending=True, educator_id=educator_id)


def get_owned_course(gw: Gateway, course_id: int, user: "User") -> "Course":
    """Owner-scoped fetch; another educator's course is reported as not found."""
    course = gw.get("courses", course_id)
    if course.educator_id != user.id:
        raise RecordNotFound(f"courses: {course_id} not owned by user {user.id}")
    return course


def create_course(gw: Gateway, payload: dict, user: "User") -> "Course":
    """Create a new course owned by `user`."""
    now = datetime.utcnow()
    course = gw.insert(
        "courses",
        {**_course_values(payload), "educator_id": user.id, "created_at": now, "updated_at": now},
    )
    record_event(
        gw.s,
        actor=user,
        action="course.create",
        entity_type="Course",
        entity_id=str(course.id),
        metadata={"title": course.title, "difficulty": course.difficulty},
    )
    return course


def update_course(gw: Gateway, course: "Course", payload: dict, user: "User") -> "Course":
    """Update an existing course, recording the changed fields."""
    values = _course_values(payload)
    changes = {}
    for key, new in values.items():
        old = getattr(course, key)
        if new != old:
            changes[key] = {"old": old, "new": new}
    course = gw.update("courses", course.id, {**values, "updated_at": datetime.utcnow()})
    record_event(
        gw.s,
        actor=user,
        action="course.edit",
        entity_type="Course",
        entity_id=str(course.id),
        metadata={"title": course.title, "changes": changes},
    )
    return course


def delete_course(gw: Gateway, course: "Course", user: "User") -> None:
    course_id, title = course.id, course.title
    gw.delete("courses", course_id)
    record_event(
        gw.s,
        actor=user,
        action="course.delete",
        entity_type="Course",
        entity_id=str(course_id),
        metadata={"title": title},
    )


# ---------- Video ----------
def video_embed_url(url: str | None) -> str | None:
    """
    Player URL for a stored video link. YouTube and Vimeo links are rewritten
    to their embed form; anything else is returned unchanged.
    """
    if not url:
        return None

    if "youtube.com" in url or "youtu.be" in url:
        if "youtu.be" in url:
            video_id = url.split("youtu.be/", 1)[1] if "youtu.be/" in url else ""
            video_id = video_id.split("?", 1)[0]
        else:
            video_id = url.split("v=", 1)[1] if "v=" in url else ""
            video_id = video_id.split("&", 1)[0]
        return f"https://www.youtube.com/embed/{video_id}"

    if "vimeo.com" in url:
        video_id = url.split("vimeo.com/", 1)[1] if "vimeo.com/" in url else ""
        video_id = video_id.split("?", 1)[0]
        return f"https://player.vimeo.com/video/{video_id}"

    return url
