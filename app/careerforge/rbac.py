from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import TYPE_CHECKING, Any

from flask import current_app, flash, g, redirect, request, url_for

from app.careerforge.constants import ROLE_EDUCATOR, ROLE_RECRUITER, ROLE_STUDENT

if TYPE_CHECKING:
    from app.careerforge.gateway import Gateway


ACCESS_DENIED_MESSAGES = {
    ROLE_STUDENT: "Access denied. Students only.",
    ROLE_EDUCATOR: "Access denied. Educators only.",
    ROLE_RECRUITER: "Access denied. Recruiters only.",
}


def load_roles(gw: "Gateway", user_id: int) -> frozenset[str]:
    """All role tags held by the identity (zero or more)."""
    return frozenset(r.role for r in gw.select("user_roles", user_id=user_id))


def require_role(role: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            from app.careerforge.auth import current_context

            ctx = current_context()
            # Unauthenticated → redirect to login.
            if not ctx.is_authenticated:
                nxt = request.full_path or request.path
                if nxt.endswith("?"):
                    nxt = nxt[:-1]
                return redirect(url_for("auth.login_get", next=nxt))
            # Authenticated but missing the role → notify and send to the dashboard.
            if role not in ctx.roles:
                g.missing_role = role
                current_app.logger.warning(
                    "Access denied: missing_role=%s user_id=%s request_id=%s",
                    role,
                    ctx.user.id if ctx.user else None,
                    getattr(g, "request_id", None),
                )
                flash(ACCESS_DENIED_MESSAGES.get(role, "Access denied."), "danger")
                return redirect(url_for("dashboard.index"))
            return fn(*args, **kwargs)

        return wrapped

    return decorator
