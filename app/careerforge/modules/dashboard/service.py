"""
Dashboard stats keyed by the viewer's role set.

Each role contributes its own counters:
  student   -> enrollments, streak
  educator  -> courses
  recruiter -> events, internships
Roles the user does not hold cost nothing and leave their fields at 0.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import Any, Protocol

from app.careerforge.constants import ROLE_EDUCATOR, ROLE_RECRUITER, ROLE_STUDENT
from app.careerforge.gateway import Gateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatBundle:
    courses: int = 0
    enrollments: int = 0
    events: int = 0
    internships: int = 0
    streak: int = 0


class StatSource(Protocol):
    def count(self, collection: str, **eq: Any) -> int: ...

    def current_streak(self, user_id: int) -> int: ...


class GatewayStatSource:
    """StatSource over the request's gateway. A failed query is rolled back so later counts still run."""

    def __init__(self, gw: Gateway):
        self.gw = gw

    def _guard(self, fn: Callable[[], int]) -> int:
        try:
            return fn()
        except Exception:
            self.gw.s.rollback()
            raise

    def count(self, collection: str, **eq: Any) -> int:
        return self._guard(lambda: self.gw.count(collection, **eq))

    def current_streak(self, user_id: int) -> int:
        def _read() -> int:
            row = self.gw.maybe_single("user_streaks", user_id=user_id)
            return row.current_streak if row else 0

        return self._guard(_read)


def _requests_for(roles: frozenset[str], user_id: int, source: StatSource) -> list[tuple[str, Callable[[], int]]]:
    reqs: list[tuple[str, Callable[[], int]]] = []
    if ROLE_STUDENT in roles:
        reqs.append(("enrollments", lambda: source.count("course_enrollments", student_id=user_id)))
        reqs.append(("streak", lambda: source.current_streak(user_id)))
    if ROLE_EDUCATOR in roles:
        reqs.append(("courses", lambda: source.count("courses", educator_id=user_id)))
    if ROLE_RECRUITER in roles:
        reqs.append(("events", lambda: source.count("events", organizer_id=user_id)))
        reqs.append(("internships", lambda: source.count("internships", recruiter_id=user_id)))
    return reqs


def aggregate_stats(roles: Iterable[str], user_id: int, source: StatSource) -> StatBundle:
    """
    Merge the per-role counters into one bundle. Counters are independent:
    one that raises is logged and left at 0, the rest still populate.
    """
    stats = StatBundle()
    for field_name, fetch in _requests_for(frozenset(roles), user_id, source):
        try:
            value = fetch()
        except Exception as e:
            logger.warning("Dashboard stat %s failed for user_id=%s: %s", field_name, user_id, e)
            continue
        stats = replace(stats, **{field_name: max(int(value or 0), 0)})
    return stats
