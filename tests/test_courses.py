"""Tests for the course catalog, enrollment and educator course management."""
from datetime import date

import pytest
from werkzeug.security import generate_password_hash

from app.careerforge import create_app
from app.careerforge.db import session_scope
from app.careerforge.gateway import Gateway
from app.careerforge.models import Base, User, UserRole
from app.careerforge.modules.courses.models import Course, CourseEnrollment
from app.careerforge.modules.courses.service import filter_courses, video_embed_url
from app.careerforge.modules.streaks.models import UserStreak


def _add_user(s, email, roles):
    u = User(email=email, password_hash=generate_password_hash("pw"), full_name=email.split("@")[0], is_active=True)
    for role in roles:
        u.roles.append(UserRole(role=role))
    s.add(u)
    return u


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])

    with session_scope(app) as s:
        educator = _add_user(s, "educator@example.com", ["educator"])
        _add_user(s, "other@example.com", ["educator"])
        _add_user(s, "student@example.com", ["student"])
        _add_user(s, "both@example.com", ["student", "educator"])
        s.flush()
        s.add_all(
            [
                Course(
                    educator_id=educator.id,
                    title="Python Basics",
                    description="Variables and loops",
                    duration_hours=4,
                    difficulty="beginner",
                    video_url="https://www.youtube.com/watch?v=abc123&t=10",
                ),
                Course(
                    educator_id=educator.id,
                    title="Advanced SQL",
                    description="Window functions",
                    duration_hours=6,
                    difficulty="advanced",
                ),
                Course(
                    educator_id=educator.id,
                    title="Draft Course",
                    description="Not ready",
                    duration_hours=1,
                    is_published=False,
                ),
            ]
        )

    return app.test_client()


def _login(client, email):
    client.post("/auth/login", data={"email": email, "password": "pw"}, follow_redirects=True)


def _course_id(client, title):
    with session_scope(client.application) as s:
        return Gateway(s).single("courses", title=title).id


def _user_id(client, email):
    with session_scope(client.application) as s:
        return Gateway(s).single("profiles", email=email).id


# ---------- video embed ----------
@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "https://www.youtube.com/embed/dQw4w9WgXcQ"),
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ&list=PL1", "https://www.youtube.com/embed/dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ?t=42", "https://www.youtube.com/embed/dQw4w9WgXcQ"),
        ("https://vimeo.com/76979871", "https://player.vimeo.com/video/76979871"),
        ("https://example.com/v.mp4", "https://example.com/v.mp4"),
        ("", None),
        (None, None),
    ],
)
def test_video_embed_url(url, expected):
    assert video_embed_url(url) == expected


# ---------- catalog ----------
def test_filter_courses_by_search_and_difficulty():
    courses = [
        Course(title="Python Basics", description="Variables", difficulty="beginner"),
        Course(title="Advanced SQL", description="Window functions in python", difficulty="advanced"),
    ]
    assert [c.title for c in filter_courses(courses, "PYTHON")] == ["Python Basics", "Advanced SQL"]
    assert [c.title for c in filter_courses(courses, "python", "advanced")] == ["Advanced SQL"]
    assert filter_courses(courses, "", "intermediate") == []
    assert len(filter_courses(courses, "", "all")) == 2


def test_catalog_lists_published_only(client):
    r = client.get("/courses")
    assert r.status_code == 200
    assert b"Python Basics" in r.data
    assert b"Advanced SQL" in r.data
    assert b"Draft Course" not in r.data


def test_catalog_query_filters(client):
    r = client.get("/courses?q=sql&difficulty=advanced")
    assert b"Advanced SQL" in r.data
    assert b"Python Basics" not in r.data

    r = client.get("/courses?q=nothing-matches")
    assert b"No courses found." in r.data


def test_detail_missing_course_redirects_with_flash(client):
    r = client.get("/courses/9999", follow_redirects=True)
    assert r.status_code == 200
    assert b"Course not found" in r.data
    assert b"Explore Courses" in r.data


def test_detail_hides_video_until_enrolled(client):
    cid = _course_id(client, "Python Basics")
    r = client.get(f"/courses/{cid}")
    assert r.status_code == 200
    assert b"Enroll Now" in r.data
    assert b"<iframe" not in r.data


# ---------- enrollment ----------
def test_enroll_requires_login(client):
    cid = _course_id(client, "Python Basics")
    r = client.post(f"/courses/{cid}/enroll", follow_redirects=False)
    assert r.status_code == 302
    assert "/auth/login" in r.headers["Location"]

    r = client.get(r.headers["Location"])
    assert b"Please sign in to enroll" in r.data


def test_enroll_creates_enrollment_and_streak(client):
    _login(client, "student@example.com")
    cid = _course_id(client, "Python Basics")

    r = client.post(f"/courses/{cid}/enroll", follow_redirects=True)
    assert r.status_code == 200
    assert b"Successfully enrolled!" in r.data
    assert b"https://www.youtube.com/embed/abc123" in r.data

    uid = _user_id(client, "student@example.com")
    with session_scope(client.application) as s:
        assert s.query(CourseEnrollment).filter_by(course_id=cid, student_id=uid).count() == 1
        streak = s.get(UserStreak, uid)
        assert streak.current_streak == 1
        assert streak.longest_streak == 1
        assert streak.last_activity_date == date.today()


def test_second_enrollment_same_day_keeps_streak(client):
    _login(client, "student@example.com")
    client.post(f"/courses/{_course_id(client, 'Python Basics')}/enroll")
    client.post(f"/courses/{_course_id(client, 'Advanced SQL')}/enroll")

    uid = _user_id(client, "student@example.com")
    with session_scope(client.application) as s:
        assert s.get(UserStreak, uid).current_streak == 1
        assert s.query(CourseEnrollment).filter_by(student_id=uid).count() == 2


def test_duplicate_enrollment_is_rejected(client):
    _login(client, "student@example.com")
    cid = _course_id(client, "Python Basics")
    client.post(f"/courses/{cid}/enroll")

    r = client.post(f"/courses/{cid}/enroll", follow_redirects=True)
    assert b"Failed to enroll in course" in r.data

    uid = _user_id(client, "student@example.com")
    with session_scope(client.application) as s:
        assert s.query(CourseEnrollment).filter_by(course_id=cid, student_id=uid).count() == 1


def test_streak_failure_does_not_undo_enrollment(client, monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("streak store down")

    monkeypatch.setattr("app.careerforge.modules.courses.service.record_activity", _boom)

    _login(client, "student@example.com")
    cid = _course_id(client, "Python Basics")
    r = client.post(f"/courses/{cid}/enroll", follow_redirects=True)
    assert b"Successfully enrolled!" in r.data

    uid = _user_id(client, "student@example.com")
    with session_scope(client.application) as s:
        assert s.query(CourseEnrollment).filter_by(course_id=cid, student_id=uid).count() == 1
        assert s.get(UserStreak, uid) is None


def test_catalog_marks_enrolled_courses(client):
    _login(client, "student@example.com")
    client.post(f"/courses/{_course_id(client, 'Python Basics')}/enroll")
    r = client.get("/courses")
    assert b">Enrolled<" in r.data


# ---------- visibility ----------
def test_draft_course_detail_is_not_found(client):
    _login(client, "student@example.com")
    cid = _course_id(client, "Draft Course")
    r = client.get(f"/courses/{cid}", follow_redirects=True)
    assert b"Course not found" in r.data
    assert b"Not ready" not in r.data


def test_enroll_in_draft_course_is_refused(client):
    _login(client, "student@example.com")
    cid = _course_id(client, "Draft Course")
    r = client.post(f"/courses/{cid}/enroll", follow_redirects=True)
    assert b"Course not found" in r.data

    uid = _user_id(client, "student@example.com")
    with session_scope(client.application) as s:
        assert s.query(CourseEnrollment).filter_by(course_id=cid).count() == 0
        assert s.get(UserStreak, uid) is None


def test_owner_can_preview_draft(client):
    _login(client, "educator@example.com")
    r = client.get(f"/courses/{_course_id(client, 'Draft Course')}")
    assert r.status_code == 200
    assert b"Draft Course" in r.data


def test_deactivated_course_leaves_catalog(client):
    cid = _course_id(client, "Advanced SQL")
    with session_scope(client.application) as s:
        s.get(Course, cid).is_active = False

    r = client.get("/courses")
    assert b"Advanced SQL" not in r.data
    r = client.get(f"/courses/{cid}", follow_redirects=True)
    assert b"Course not found" in r.data


def test_catalog_never_shows_owner_email(client):
    with session_scope(client.application) as s:
        Gateway(s).single("profiles", email="educator@example.com").full_name = None

    r = client.get("/courses")
    assert b"educator@example.com" not in r.data
    assert b"by Anonymous" in r.data

    r = client.get(f"/courses/{_course_id(client, 'Python Basics')}")
    assert b"educator@example.com" not in r.data
    assert b"Instructor: Anonymous" in r.data


# ---------- management ----------
def _course_form(**overrides):
    data = {
        "title": "Intro to Flask",
        "description": "Blueprints and views",
        "difficulty": "intermediate",
        "duration_hours": "5",
        "category": "Web",
        "video_url": "https://vimeo.com/123",
        "is_published": "on",
        "is_active": "on",
    }
    data.update(overrides)
    return data


def test_manage_requires_login(client):
    r = client.get("/manage-courses")
    assert r.status_code == 302
    assert "/auth/login" in r.headers["Location"]


def test_manage_denied_for_student(client):
    _login(client, "student@example.com")
    r = client.get("/manage-courses", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/dashboard")

    r = client.get("/dashboard")
    assert b"Access denied. Educators only." in r.data


def test_manage_allowed_for_multi_role_user(client):
    _login(client, "both@example.com")
    r = client.get("/manage-courses")
    assert r.status_code == 200


def test_manage_lists_only_own_courses(client):
    _login(client, "other@example.com")
    r = client.get("/manage-courses")
    assert r.status_code == 200
    assert b"Python Basics" not in r.data


def test_create_course(client):
    _login(client, "educator@example.com")
    r = client.post("/manage-courses/new", data=_course_form(), follow_redirects=True)
    assert r.status_code == 200
    assert b"Course created successfully" in r.data

    with session_scope(client.application) as s:
        c = Gateway(s).single("courses", title="Intro to Flask")
        assert c.duration_hours == 5
        assert c.difficulty == "intermediate"
        assert c.is_published is True
        assert c.is_active is True
        assert c.educator.email == "educator@example.com"


def test_create_course_validation(client):
    _login(client, "educator@example.com")
    r = client.post(
        "/manage-courses/new",
        data=_course_form(title="", duration_hours="abc", difficulty="expert"),
        follow_redirects=True,
    )
    assert b"Title is required." in r.data
    assert b"Duration (hours) must be a whole number." in r.data
    assert b"Invalid difficulty." in r.data
    with session_scope(client.application) as s:
        assert Gateway(s).count("courses") == 3


def test_edit_course(client):
    _login(client, "educator@example.com")
    cid = _course_id(client, "Advanced SQL")
    r = client.get(f"/manage-courses/{cid}/edit")
    assert r.status_code == 200

    r = client.post(
        f"/manage-courses/{cid}/edit",
        data=_course_form(title="Advanced SQL II", difficulty="advanced", duration_hours="8"),
        follow_redirects=True,
    )
    assert b"Course updated successfully" in r.data
    with session_scope(client.application) as s:
        c = s.get(Course, cid)
        assert c.title == "Advanced SQL II"
        assert c.duration_hours == 8


def test_non_owner_cannot_edit_or_delete(client):
    _login(client, "other@example.com")
    cid = _course_id(client, "Advanced SQL")

    r = client.get(f"/manage-courses/{cid}/edit", follow_redirects=True)
    assert b"Course not found" in r.data

    r = client.post(f"/manage-courses/{cid}/delete", follow_redirects=True)
    assert b"Course not found" in r.data
    with session_scope(client.application) as s:
        assert s.get(Course, cid) is not None


def test_delete_course_cascades_enrollments(client):
    _login(client, "student@example.com")
    cid = _course_id(client, "Python Basics")
    client.post(f"/courses/{cid}/enroll")
    client.get("/auth/logout")

    _login(client, "educator@example.com")
    r = client.post(f"/manage-courses/{cid}/delete", follow_redirects=True)
    assert b"Course deleted successfully" in r.data
    with session_scope(client.application) as s:
        assert s.get(Course, cid) is None
        assert s.query(CourseEnrollment).filter_by(course_id=cid).count() == 0
