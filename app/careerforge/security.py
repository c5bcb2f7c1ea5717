import hmac
import secrets

from flask import Request, session


def ensure_csrf_token() -> str:
    """Ensure a CSRF token exists in the session and return it."""
    token = session.get("csrf_token")
    if not token:
        token = secrets.token_urlsafe(32)
        session["csrf_token"] = token
    return token


def validate_csrf(req: Request) -> bool:
    """Validate CSRF token from the form or the X-CSRF-Token header."""
    token = req.headers.get("X-CSRF-Token") or req.form.get("csrf_token")
    expected = session.get("csrf_token")
    if not token or not expected:
        return False
    return hmac.compare_digest(str(token), str(expected))


def is_safe_next(nxt: str | None) -> bool:
    """Only local paths are allowed as post-login redirects."""
    return bool(nxt) and nxt.startswith("/") and not nxt.startswith("//")
