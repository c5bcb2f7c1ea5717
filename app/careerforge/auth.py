from __future__ import annotations

import uuid
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from functools import wraps
from typing import Any

from flask import Blueprint, current_app, flash, g, redirect, render_template, request, session, url_for
from werkzeug.security import check_password_hash, generate_password_hash

from app.careerforge.audit import record_event
from app.careerforge.constants import ROLE_TAGS
from app.careerforge.db import db_session
from app.careerforge.gateway import Gateway, WriteRejected
from app.careerforge.models import User
from app.careerforge.rbac import load_roles
from app.careerforge.security import is_safe_next

bp = Blueprint("auth", __name__)
_login_attempts: dict[str, list[datetime]] = defaultdict(list)

STATUS_ANONYMOUS = "anonymous"
STATUS_READY = "ready"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class SessionContext:
    """
    Who is making this request. Resolved once per request in `before_request`
    and read by every view from `g.session_context`.
    """

    status: str = STATUS_ANONYMOUS
    user: User | None = None
    roles: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_authenticated(self) -> bool:
        return self.status == STATUS_READY and self.user is not None

    def has_role(self, role: str) -> bool:
        return self.is_authenticated and role in self.roles


ANONYMOUS = SessionContext()


def current_context() -> SessionContext:
    return getattr(g, "session_context", None) or ANONYMOUS


def _check_rate_limit(ip: str) -> bool:
    now = datetime.utcnow()
    cutoff = now - timedelta(seconds=current_app.config.get("LOGIN_RATE_WINDOW", 300))
    _login_attempts[ip] = [t for t in _login_attempts[ip] if t > cutoff]
    return len(_login_attempts[ip]) >= current_app.config.get("LOGIN_RATE_LIMIT", 5)


def _record_attempt(ip: str) -> None:
    _login_attempts[ip].append(datetime.utcnow())


def load_session_context() -> None:
    """
    Loads g.session_context (and g.current_user) from the signed session cookie.
    Also assigns a simple per-request request_id (for audit/log correlation).
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.session_context = ANONYMOUS
    g.current_user = None
    if request.path.startswith(("/static/", "/health", "/healthz")):
        return

    user_id = session.get("user_id")
    if not user_id:
        return

    try:
        s = db_session()
        user = s.get(User, int(user_id))
        if not user or not user.is_active:
            session.pop("user_id", None)
            return
        roles = load_roles(Gateway(s), user.id)
    except Exception as e:
        current_app.logger.error("load_session_context DB error (clearing session): %s", e)
        session.pop("user_id", None)
        g.session_context = SessionContext(status=STATUS_ERROR)
        return

    g.current_user = user
    g.session_context = SessionContext(status=STATUS_READY, user=user, roles=roles)


def _login_redirect():
    nxt = request.full_path or request.path
    # Avoid trailing '?' from full_path when there is no query string.
    if nxt.endswith("?"):
        nxt = nxt[:-1]
    return redirect(url_for("auth.login_get", next=nxt))


def login_required(fn: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        if not current_context().is_authenticated:
            return _login_redirect()
        return fn(*args, **kwargs)

    return wrapped


@bp.get("/login")
def login_get():
    nxt = (request.args.get("next") or "").strip()
    return render_template("auth/login.html", next=nxt)


@bp.post("/login")
def login_post():
    email = (request.form.get("email") or "").strip().lower()
    password = request.form.get("password") or ""
    nxt = (request.form.get("next") or "").strip()
    ip = request.remote_addr or "unknown"

    if _check_rate_limit(ip):
        flash("Too many login attempts. Please wait a few minutes.", "danger")
        return redirect(url_for("auth.login_get"))

    _record_attempt(ip)

    try:
        s = db_session()
        user = s.query(User).filter(User.email == email).one_or_none()
        if not user or not user.is_active or not check_password_hash(user.password_hash, password):
            record_event(
                s,
                actor=None,
                action="auth.login_failed",
                entity_type="User",
                entity_id=email,
                reason="Invalid credentials",
                metadata={"email": email},
            )
            s.commit()
            flash("Invalid credentials.", "danger")
            return redirect(url_for("auth.login_get", next=nxt or None))

        session["user_id"] = user.id
        _login_attempts[ip].clear()
        record_event(s, actor=user, action="auth.login", entity_type="User", entity_id=str(user.id))
        s.commit()
        if is_safe_next(nxt):
            return redirect(nxt)
        return redirect(url_for("dashboard.index"))
    except Exception:
        current_app.logger.exception("Login POST crashed (email=%s request_id=%s)", email, getattr(g, "request_id", None))
        raise


def validate_signup_payload(payload: dict) -> list[str]:
    errors = []
    email = (payload.get("email") or "").strip()
    if not email or "@" not in email:
        errors.append("A valid email is required.")
    if len(payload.get("password") or "") < 6:
        errors.append("Password must be at least 6 characters.")
    roles = payload.get("roles") or []
    if not roles:
        errors.append("Pick at least one role.")
    unknown = [r for r in roles if r not in ROLE_TAGS]
    if unknown:
        errors.append(f"Invalid role. Must be one of: {', '.join(ROLE_TAGS)}")
    return errors


def create_user(gw: Gateway, payload: dict) -> User:
    """Insert a profile plus one user_roles row per requested role."""
    user = gw.insert(
        "profiles",
        {
            "email": (payload.get("email") or "").strip().lower(),
            "password_hash": generate_password_hash(payload["password"]),
            "full_name": (payload.get("full_name") or "").strip() or None,
            "is_active": True,
        },
    )
    for role in sorted(set(payload.get("roles") or [])):
        gw.insert("user_roles", {"user_id": user.id, "role": role})
    record_event(
        gw.s,
        actor=user,
        action="auth.signup",
        entity_type="User",
        entity_id=str(user.id),
        metadata={"roles": sorted(set(payload.get("roles") or []))},
    )
    return user


@bp.get("/signup")
def signup_get():
    return render_template("auth/signup.html", role_tags=ROLE_TAGS)


@bp.post("/signup")
def signup_post():
    payload = {
        "email": request.form.get("email"),
        "password": request.form.get("password"),
        "full_name": request.form.get("full_name"),
        "roles": request.form.getlist("roles"),
    }
    errors = validate_signup_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("auth.signup_get"))

    s = db_session()
    try:
        user = create_user(Gateway(s), payload)
        s.commit()
    except WriteRejected:
        flash("An account with that email already exists.", "danger")
        return redirect(url_for("auth.signup_get"))

    session["user_id"] = user.id
    flash("Account created. Welcome to CareerForge!", "success")
    return redirect(url_for("dashboard.index"))


@bp.get("/logout")
def logout():
    s = db_session()
    user = current_context().user
    if user:
        record_event(s, actor=user, action="auth.logout", entity_type="User", entity_id=str(user.id))
        s.commit()
    session.pop("user_id", None)
    flash("Signed out successfully", "success")
    return redirect(url_for("routes.index"))
