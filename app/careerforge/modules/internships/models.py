from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.careerforge.models import Base

if TYPE_CHECKING:
    from app.careerforge.models import User


class Internship(Base):
    __tablename__ = "internships"
    __table_args__ = (
        Index("idx_internships_recruiter", "recruiter_id"),
        Index("idx_internships_active", "is_active"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    recruiter_id: Mapped[int] = mapped_column(ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    # Required
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    application_deadline: Mapped[date] = mapped_column(Date, nullable=False)

    # Optional
    duration_months: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stipend: Mapped[str | None] = mapped_column(String(128), nullable=True)  # free text, e.g. "$2000/month"
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    recruiter: Mapped["User"] = relationship("User", lazy="selectin")
    applications: Mapped[list["InternshipApplication"]] = relationship(
        "InternshipApplication",
        back_populates="internship",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class InternshipApplication(Base):
    __tablename__ = "internship_applications"
    __table_args__ = (
        UniqueConstraint("internship_id", "student_id", name="uq_internship_applications_internship_student"),
        Index("idx_internship_applications_student", "student_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    internship_id: Mapped[int] = mapped_column(ForeignKey("internships.id", ondelete="CASCADE"), nullable=False)
    student_id: Mapped[int] = mapped_column(ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    internship: Mapped[Internship] = relationship("Internship", back_populates="applications")
