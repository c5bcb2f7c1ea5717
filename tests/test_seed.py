"""Tests for the release-time admin seed."""
from app.careerforge import create_app
from app.careerforge.db import session_scope
from app.careerforge.models import Base, User
from scripts.init_db import seed_only


def test_seed_admin_is_idempotent(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path/'seed.db'}"
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("ADMIN_EMAIL", "Admin@Example.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "pw")

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])

    seed_only(database_url=db_url)
    seed_only(database_url=db_url)

    with session_scope(app) as s:
        users = s.query(User).filter_by(email="admin@example.com").all()
        assert len(users) == 1
        assert users[0].role_tags == frozenset({"student", "educator", "recruiter"})
        assert len(users[0].roles) == 3


def test_seed_admin_login(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path/'seed.db'}"
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", db_url)
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("ADMIN_EMAIL", "admin@example.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "pw")

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])
    seed_only(database_url=db_url)

    client = app.test_client()
    r = client.post("/auth/login", data={"email": "admin@example.com", "password": "pw"}, follow_redirects=True)
    assert r.status_code == 200
    assert b"Administrator" in r.data
