"""Tests for the collection gateway and its error taxonomy."""
import pytest
from werkzeug.security import generate_password_hash

from app.careerforge import create_app
from app.careerforge.db import session_scope
from app.careerforge.gateway import Gateway, MultipleRecords, RecordNotFound, WriteRejected
from app.careerforge.models import Base


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])

    with session_scope(app) as s:
        gw = Gateway(s)
        for email in ("a@example.com", "b@example.com"):
            u = gw.insert("profiles", {"email": email, "password_hash": generate_password_hash("pw")})
            gw.insert("user_roles", {"user_id": u.id, "role": "student"})
    return app


def _user_id(s, email):
    return Gateway(s).single("profiles", email=email).id


def test_single_returns_exactly_one(app):
    with session_scope(app) as s:
        row = Gateway(s).single("profiles", email="a@example.com")
        assert row.email == "a@example.com"


def test_single_zero_rows_raises_not_found(app):
    with session_scope(app) as s:
        with pytest.raises(RecordNotFound):
            Gateway(s).single("profiles", email="nobody@example.com")


def test_maybe_single_zero_rows_is_none(app):
    with session_scope(app) as s:
        assert Gateway(s).maybe_single("user_streaks", user_id=999) is None


def test_single_many_rows_raises_multiple(app):
    with session_scope(app) as s:
        with pytest.raises(MultipleRecords):
            Gateway(s).single("user_roles", role="student")


def test_get_missing_id_raises_not_found(app):
    with session_scope(app) as s:
        with pytest.raises(RecordNotFound):
            Gateway(s).get("courses", 12345)


def test_duplicate_insert_rejected(app):
    with session_scope(app) as s:
        gw = Gateway(s)
        uid = _user_id(s, "a@example.com")
        with pytest.raises(WriteRejected):
            gw.insert("user_roles", {"user_id": uid, "role": "student"})
        # session is usable again after the rejected write
        assert gw.count("user_roles", user_id=uid) == 1


def test_check_constraint_rejects_unknown_role(app):
    with session_scope(app) as s:
        uid = _user_id(s, "a@example.com")
        with pytest.raises(WriteRejected):
            Gateway(s).insert("user_roles", {"user_id": uid, "role": "admin"})


def test_select_orders_and_filters(app):
    with session_scope(app) as s:
        gw = Gateway(s)
        rows = gw.select("profiles", order_by="email", descending=True)
        assert [r.email for r in rows] == ["b@example.com", "a@example.com"]
        assert gw.count("profiles", email="a@example.com") == 1


def test_unknown_collection_and_column(app):
    with session_scope(app) as s:
        gw = Gateway(s)
        with pytest.raises(KeyError):
            gw.select("widgets")
        with pytest.raises(KeyError):
            gw.count("profiles", nickname="x")


def test_update_and_delete(app):
    with session_scope(app) as s:
        gw = Gateway(s)
        uid = _user_id(s, "a@example.com")
        gw.update("profiles", uid, {"full_name": "Ada"})
        assert gw.get("profiles", uid).display_name == "Ada"

        gw.delete("profiles", uid)
        with pytest.raises(RecordNotFound):
            gw.get("profiles", uid)
