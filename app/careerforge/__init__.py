import logging
import os
from datetime import timedelta

from flask import Flask, g, render_template, request, session
from dotenv import load_dotenv

from app.careerforge.config import load_config
from app.careerforge.db import init_db, teardown_db_session
from app.careerforge.routes import bp as routes_bp
from app.careerforge.auth import bp as auth_bp, current_context, load_session_context
from app.careerforge.modules.courses.admin import bp as courses_bp
from app.careerforge.modules.dashboard.admin import bp as dashboard_bp
from app.careerforge.modules.events.admin import bp as events_bp
from app.careerforge.modules.internships.admin import bp as internships_bp


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=8)
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True

    # Runs before the CSRF guard so error pages can render the nav.
    app.before_request(load_session_context)

    from app.careerforge.security import ensure_csrf_token, validate_csrf

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.context_processor
    def _inject_session_context() -> dict:
        ctx = current_context()
        return {"ctx": ctx, "has_role": ctx.has_role}

    @app.template_filter("dateformat")
    def _dateformat_filter(value, format: str = "%b %d, %Y") -> str:
        if value is None:
            return "—"
        if hasattr(value, "strftime"):
            return value.strftime(format)
        return str(value)

    @app.before_request
    def _csrf_guard():
        if request.path.startswith(("/static/", "/health", "/healthz")):
            return None
        ensure_csrf_token()
        session.permanent = True
        if not app.config.get("CSRF_ENABLED", True):
            return None
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            # Login/signup forms carry no session yet.
            if (request.endpoint or "").startswith("auth."):
                return None
            if not validate_csrf(request):
                return render_template("errors/400.html", message="CSRF token missing or invalid."), 400

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)

    if hasattr(os, "register_at_fork"):
        def _after_fork_child():
            engine = app.extensions.get("sqlalchemy_engine")
            if engine:
                engine.dispose()
                app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

        os.register_at_fork(after_in_child=_after_fork_child)

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(courses_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(internships_bp)

    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return render_template("errors/500.html"), 500

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html", path=request.path), 404

    @app.errorhandler(403)
    def _err_403(e):  # type: ignore[no-redef]
        app.logger.warning("Forbidden: path=%s request_id=%s", request.path, getattr(g, "request_id", None))
        return render_template("errors/403.html"), 403

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
