# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Institution (tenant) and academic structure models.

Every model here except Institution carries ``institution_id``; services
always filter on it so that cross-tenant references behave as absent.
"""

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, uuid_pk
from src.models.common import GradingFormat, SubjectType
from src.utils.datetime import utc_now


class Institution(Base, TimestampMixin):
    """A school operating on the shared platform."""

    __tablename__ = "institutions"

    id: Mapped[str] = uuid_pk()
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(63), unique=True, nullable=False)
    custom_domain: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    custom_domain_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    grading_format: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default=GradingFormat.SECUNDARIA_DO.value,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    levels: Mapped[list["Level"]] = relationship(back_populates="institution")


class Level(Base, TimestampMixin):
    """A grade/cohort (nivel) within an institution."""

    __tablename__ = "levels"
    __table_args__ = (Index("ix_levels_institution_id", "institution_id"),)

    id: Mapped[str] = uuid_pk()
    institution_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("institutions.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Overrides the institution format when set
    grading_format: Mapped[str | None] = mapped_column(String(30), nullable=True)

    institution: Mapped[Institution] = relationship(back_populates="levels")

    @property
    def effective_grading_format(self) -> str:
        """Format that drives grade-sheet generation for this level."""
        return self.grading_format or self.institution.grading_format


class AcademicCycle(Base):
    """A school year (ciclo lectivo). At most one is active per institution."""

    __tablename__ = "academic_cycles"
    __table_args__ = (Index("ix_academic_cycles_institution_id", "institution_id"),)

    id: Mapped[str] = uuid_pk()
    institution_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("institutions.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )


class Subject(Base):
    """A taught subject (materia)."""

    __tablename__ = "subjects"

    id: Mapped[str] = uuid_pk()
    institution_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("institutions.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    subject_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SubjectType.GENERAL.value,
    )


class Class(Base, TimestampMixin):
    """One offering of a subject at a level during an academic cycle."""

    __tablename__ = "classes"
    __table_args__ = (
        Index("ix_classes_level_cycle", "level_id", "academic_cycle_id"),
        Index("ix_classes_institution_id", "institution_id"),
    )

    id: Mapped[str] = uuid_pk()
    institution_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("institutions.id", ondelete="CASCADE"),
        nullable=False,
    )
    level_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("levels.id", ondelete="CASCADE"),
        nullable=False,
    )
    academic_cycle_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("academic_cycles.id", ondelete="CASCADE"),
        nullable=False,
    )
    subject_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("subjects.id", ondelete="RESTRICT"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    subject: Mapped[Subject] = relationship()
    level: Mapped[Level] = relationship()
    academic_cycle: Mapped[AcademicCycle] = relationship()
