from __future__ import annotations

import logging
from datetime import date

from app.careerforge.gateway import Gateway
from app.careerforge.modules.streaks.engine import StreakRecord, next_streak

logger = logging.getLogger(__name__)


def get_streak(gw: Gateway, user_id: int) -> StreakRecord | None:
    row = gw.maybe_single("user_streaks", user_id=user_id)
    if row is None:
        return None
    return StreakRecord(
        current_streak=row.current_streak,
        longest_streak=row.longest_streak,
        last_activity_date=row.last_activity_date,
    )


def record_activity(gw: Gateway, user_id: int, today: date | None = None) -> StreakRecord:
    """
    Read the user's streak, advance it for one qualifying activity and write it back.
    Exactly one insert or update; the caller commits.
    """
    today = today or date.today()
    existing = get_streak(gw, user_id)
    nxt = next_streak(existing, today)
    values = {
        "current_streak": nxt.current_streak,
        "longest_streak": nxt.longest_streak,
        "last_activity_date": nxt.last_activity_date,
    }
    if existing is None:
        gw.insert("user_streaks", {"user_id": user_id, **values})
    else:
        gw.update("user_streaks", user_id, values)
    logger.debug("streak user_id=%s -> %s", user_id, nxt)
    return nxt
