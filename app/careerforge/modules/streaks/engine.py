"""
Daily activity streak: pure functions, no DB access.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class StreakRecord:
    current_streak: int
    longest_streak: int
    last_activity_date: date


def next_streak(existing: StreakRecord | None, today: date) -> StreakRecord:
    """
    State after one qualifying activity on `today`.

    First activity starts at 1. The day after the last activity extends the
    streak, a gap of one or more missed days resets it to 1, and a repeat on
    the same day (or a `today` earlier than the stored date) leaves it alone.
    """
    if existing is None:
        return StreakRecord(current_streak=1, longest_streak=1, last_activity_date=today)

    diff_days = (today - existing.last_activity_date).days
    if diff_days == 1:
        current = existing.current_streak + 1
    elif diff_days > 1:
        current = 1
    else:
        current = existing.current_streak

    return StreakRecord(
        current_streak=current,
        longest_streak=max(current, existing.longest_streak),
        last_activity_date=today,
    )
