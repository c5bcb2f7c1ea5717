"""Tests for the role-keyed dashboard stats."""
from datetime import date, datetime, timedelta

import pytest
from werkzeug.security import generate_password_hash

from app.careerforge import create_app
from app.careerforge.db import session_scope
from app.careerforge.models import Base, User, UserRole
from app.careerforge.modules.courses.models import Course, CourseEnrollment
from app.careerforge.modules.dashboard.service import StatBundle, aggregate_stats
from app.careerforge.modules.events.models import Event
from app.careerforge.modules.internships.models import Internship
from app.careerforge.modules.streaks.models import UserStreak


class FakeSource:
    def __init__(self, counts=None, streak=0, failing=()):
        self.counts = counts or {}
        self.streak = streak
        self.failing = set(failing)
        self.calls = []

    def count(self, collection, **eq):
        self.calls.append(collection)
        if collection in self.failing:
            raise RuntimeError(f"{collection} unavailable")
        return self.counts.get(collection, 0)

    def current_streak(self, user_id):
        self.calls.append("user_streaks")
        if "user_streaks" in self.failing:
            raise RuntimeError("streak unavailable")
        return self.streak


def test_no_roles_yields_zeros_without_queries():
    src = FakeSource(counts={"courses": 9})
    assert aggregate_stats(frozenset(), 1, src) == StatBundle()
    assert src.calls == []


def test_student_fields_only():
    src = FakeSource(counts={"course_enrollments": 3, "courses": 9}, streak=4)
    stats = aggregate_stats({"student"}, 1, src)
    assert stats == StatBundle(enrollments=3, streak=4)
    assert "courses" not in src.calls


def test_recruiter_only_touches_events_and_internships():
    src = FakeSource(counts={"events": 2, "internships": 5, "courses": 7, "course_enrollments": 1})
    stats = aggregate_stats({"recruiter"}, 1, src)
    assert stats == StatBundle(events=2, internships=5)
    assert sorted(src.calls) == ["events", "internships"]


def test_multi_role_merges_all_fields():
    src = FakeSource(
        counts={"course_enrollments": 1, "courses": 2, "events": 3, "internships": 4},
        streak=6,
    )
    stats = aggregate_stats({"student", "educator", "recruiter"}, 1, src)
    assert stats == StatBundle(courses=2, enrollments=1, events=3, internships=4, streak=6)


def test_failed_count_is_isolated():
    src = FakeSource(counts={"events": 2, "internships": 5}, failing={"events"})
    stats = aggregate_stats({"recruiter"}, 1, src)
    assert stats.events == 0
    assert stats.internships == 5


def test_failed_streak_leaves_enrollments():
    src = FakeSource(counts={"course_enrollments": 2}, failing={"user_streaks"})
    stats = aggregate_stats({"student"}, 1, src)
    assert (stats.enrollments, stats.streak) == (2, 0)


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])

    with session_scope(app) as s:
        users = {}
        for email, roles in (
            ("student@example.com", ["student"]),
            ("recruiter@example.com", ["recruiter"]),
            ("educator@example.com", ["educator"]),
        ):
            u = User(email=email, password_hash=generate_password_hash("pw"), is_active=True)
            for role in roles:
                u.roles.append(UserRole(role=role))
            s.add(u)
            users[email] = u
        s.flush()

        educator = users["educator@example.com"]
        recruiter = users["recruiter@example.com"]
        student = users["student@example.com"]
        c = Course(educator_id=educator.id, title="Flask 101", description="Intro", duration_hours=3)
        s.add(c)
        s.flush()
        s.add(CourseEnrollment(course_id=c.id, student_id=student.id))
        s.add(UserStreak(user_id=student.id, current_streak=3, longest_streak=3, last_activity_date=date.today()))

        start = datetime.now() + timedelta(days=7)
        s.add(Event(organizer_id=recruiter.id, title="Hack", description="24h", start_date=start, end_date=start))
        s.add(Event(organizer_id=recruiter.id, title="Hack 2", description="48h", start_date=start, end_date=start))
        s.add(
            Internship(
                recruiter_id=recruiter.id,
                title="Backend Intern",
                company_name="Acme",
                description="APIs",
                application_deadline=date.today() + timedelta(days=30),
            )
        )

    return app.test_client()


def _login(client, email):
    client.post("/auth/login", data={"email": email, "password": "pw"}, follow_redirects=True)


def test_student_dashboard_shows_enrollments_and_streak(client):
    _login(client, "student@example.com")
    r = client.get("/dashboard")
    assert r.status_code == 200
    assert b'id="stat-enrollments">1<' in r.data
    assert b'id="stat-streak">3 days<' in r.data
    assert b"stat-courses" not in r.data
    assert b"stat-events" not in r.data


def test_recruiter_dashboard_shows_events_and_internships(client):
    _login(client, "recruiter@example.com")
    r = client.get("/dashboard")
    assert r.status_code == 200
    assert b'id="stat-events">2<' in r.data
    assert b'id="stat-internships">1<' in r.data
    assert b"stat-enrollments" not in r.data
    assert b"stat-courses" not in r.data


def test_educator_dashboard_shows_course_count(client):
    _login(client, "educator@example.com")
    r = client.get("/dashboard")
    assert b'id="stat-courses">1<' in r.data
    assert b"stat-streak" not in r.data
