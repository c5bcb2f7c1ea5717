"""
Collection-oriented access to the datastore.

Views and services talk to named collections ("courses", "user_streaks", ...)
instead of ORM classes, so every read/write goes through one place that
knows the typed record for each collection and how failures are reported:

- `RecordNotFound`   zero rows where exactly one was required
- `MultipleRecords`  more than one row where exactly one was required
- `WriteRejected`    the database refused an insert/update/delete
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.careerforge.models import AuditEvent, Base, User, UserRole
from app.careerforge.modules.courses.models import Course, CourseEnrollment
from app.careerforge.modules.events.models import Event, EventRegistration
from app.careerforge.modules.internships.models import Internship, InternshipApplication
from app.careerforge.modules.streaks.models import UserStreak

logger = logging.getLogger(__name__)


COLLECTIONS: dict[str, type[Base]] = {
    "profiles": User,
    "user_roles": UserRole,
    "courses": Course,
    "course_enrollments": CourseEnrollment,
    "user_streaks": UserStreak,
    "events": Event,
    "event_registrations": EventRegistration,
    "internships": Internship,
    "internship_applications": InternshipApplication,
    "audit_events": AuditEvent,
}


class GatewayError(RuntimeError):
    pass


class RecordNotFound(GatewayError):
    pass


class MultipleRecords(GatewayError):
    pass


class WriteRejected(GatewayError):
    pass


def model_for(collection: str) -> type[Base]:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise KeyError(f"Unknown collection: {collection}") from None


class Gateway:
    def __init__(self, s: Session):
        self.s = s

    def _filtered(self, stmt, model: type[Base], eq: dict[str, Any]):
        for column, value in eq.items():
            if not hasattr(model, column):
                raise KeyError(f"{model.__tablename__} has no column {column!r}")
            stmt = stmt.where(getattr(model, column) == value)
        return stmt

    def select(
        self,
        collection: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
        **eq: Any,
    ) -> list[Any]:
        model = model_for(collection)
        stmt = self._filtered(select(model), model, eq)
        if order_by:
            col = getattr(model, order_by)
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        return list(self.s.scalars(stmt).all())

    def count(self, collection: str, **eq: Any) -> int:
        """Count-only select; no rows are loaded."""
        model = model_for(collection)
        stmt = self._filtered(select(func.count()).select_from(model), model, eq)
        return int(self.s.scalar(stmt) or 0)

    def maybe_single(self, collection: str, **eq: Any) -> Any | None:
        model = model_for(collection)
        rows = list(self.s.scalars(self._filtered(select(model), model, eq).limit(2)).all())
        if len(rows) > 1:
            raise MultipleRecords(f"{collection}: more than one row matches {eq}")
        return rows[0] if rows else None

    def single(self, collection: str, **eq: Any) -> Any:
        row = self.maybe_single(collection, **eq)
        if row is None:
            raise RecordNotFound(f"{collection}: no row matches {eq}")
        return row

    def get(self, collection: str, record_id: Any) -> Any:
        row = self.s.get(model_for(collection), record_id)
        if row is None:
            raise RecordNotFound(f"{collection}: no row with id {record_id!r}")
        return row

    def insert(self, collection: str, values: dict[str, Any]) -> Any:
        row = model_for(collection)(**values)
        self.s.add(row)
        self._flush(collection, "insert")
        return row

    def update(self, collection: str, record_id: Any, values: dict[str, Any]) -> Any:
        row = self.get(collection, record_id)
        for column, value in values.items():
            setattr(row, column, value)
        self._flush(collection, "update")
        return row

    def delete(self, collection: str, record_id: Any) -> None:
        row = self.get(collection, record_id)
        self.s.delete(row)
        self._flush(collection, "delete")

    def _flush(self, collection: str, op: str) -> None:
        try:
            self.s.flush()
        except IntegrityError as e:
            self.s.rollback()
            logger.info("%s %s rejected: %s", collection, op, e.orig)
            raise WriteRejected(f"{collection} {op} rejected") from e
        except SQLAlchemyError as e:
            self.s.rollback()
            logger.warning("%s %s failed: %s", collection, op, e)
            raise WriteRejected(f"{collection} {op} failed") from e
