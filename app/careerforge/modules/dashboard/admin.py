from flask import Blueprint, render_template

from app.careerforge.auth import current_context, login_required
from app.careerforge.constants import ROLE_TAGS
from app.careerforge.db import db_session
from app.careerforge.gateway import Gateway
from app.careerforge.modules.dashboard.service import GatewayStatSource, aggregate_stats

bp = Blueprint("dashboard", __name__)


@bp.get("/dashboard")
@login_required
def index():
    ctx = current_context()
    stats = aggregate_stats(ctx.roles, ctx.user.id, GatewayStatSource(Gateway(db_session())))
    return render_template(
        "dashboard/index.html",
        user=ctx.user,
        roles=[r for r in ROLE_TAGS if r in ctx.roles],
        stats=stats,
    )
