# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment and grade-tracking models.

Rows here are created together by the level enrollment bootstrap:
one Enrollment and one GradeRecord per class, five CompetencyGrade rows
per class and, for technical subjects under the polytechnic format,
ten TechnicalGrade rows. Each (student, class, cycle) owns exactly one
ledger; unique indexes reject a second one. Report cards key on the
competency/outcome code strings, so codes are positional (CF1..CF5, RA1..RA10).
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Numeric, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, uuid_pk
from src.infrastructure.database.models.institution import Class
from src.utils.datetime import utc_now

ACTIVE_ENROLLMENT_INDEX = "uq_enrollments_active_student_class"
GRADE_LEDGER_INDEX = "uq_grade_records_student_class_cycle"
COMPETENCY_LEDGER_INDEX = "uq_competency_grades_student_class_cycle_code"
TECHNICAL_LEDGER_INDEX = "uq_technical_grades_student_class_code"


def _student_fk() -> Mapped[str]:
    return mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


def _class_fk() -> Mapped[str]:
    return mapped_column(
        UUID(as_uuid=False),
        ForeignKey("classes.id", ondelete="CASCADE"),
        nullable=False,
    )


def _cycle_fk() -> Mapped[str]:
    return mapped_column(
        UUID(as_uuid=False),
        ForeignKey("academic_cycles.id", ondelete="CASCADE"),
        nullable=False,
    )


def _score() -> Mapped[Decimal | None]:
    return mapped_column(Numeric(5, 2), nullable=True)


class Enrollment(Base):
    """Student to class link (inscripcion).

    At most one active enrollment may exist per (student, class); the
    partial unique index enforces it at the storage layer.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        Index(
            ACTIVE_ENROLLMENT_INDEX,
            "student_id",
            "class_id",
            unique=True,
            postgresql_where=text("is_active"),
        ),
        Index("ix_enrollments_class_id", "class_id"),
    )

    id: Mapped[str] = uuid_pk()
    student_id: Mapped[str] = _student_fk()
    class_id: Mapped[str] = _class_fk()
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    class_: Mapped[Class] = relationship()


class GradeRecord(Base, TimestampMixin):
    """General grade ledger (calificacion) of a student in a class and cycle."""

    __tablename__ = "grade_records"
    __table_args__ = (
        Index(
            GRADE_LEDGER_INDEX,
            "student_id",
            "class_id",
            "academic_cycle_id",
            unique=True,
        ),
        Index("ix_grade_records_student_cycle", "student_id", "academic_cycle_id"),
        Index("ix_grade_records_class_id", "class_id"),
    )

    id: Mapped[str] = uuid_pk()
    student_id: Mapped[str] = _student_fk()
    class_id: Mapped[str] = _class_fk()
    academic_cycle_id: Mapped[str] = _cycle_fk()

    # Period grades and their recovery (rp) counterparts
    p1: Mapped[Decimal | None] = _score()
    p2: Mapped[Decimal | None] = _score()
    p3: Mapped[Decimal | None] = _score()
    p4: Mapped[Decimal | None] = _score()
    rp1: Mapped[Decimal | None] = _score()
    rp2: Mapped[Decimal | None] = _score()
    rp3: Mapped[Decimal | None] = _score()
    rp4: Mapped[Decimal | None] = _score()
    final_average: Mapped[Decimal | None] = _score()
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)

    class_: Mapped[Class] = relationship()


class CompetencyGrade(Base, TimestampMixin):
    """Fundamental-competency tracking row (CF1..CF5) for one class."""

    __tablename__ = "competency_grades"
    __table_args__ = (
        Index(
            COMPETENCY_LEDGER_INDEX,
            "student_id",
            "class_id",
            "academic_cycle_id",
            "competency",
            unique=True,
        ),
        Index("ix_competency_grades_student_cycle", "student_id", "academic_cycle_id"),
    )

    id: Mapped[str] = uuid_pk()
    student_id: Mapped[str] = _student_fk()
    class_id: Mapped[str] = _class_fk()
    academic_cycle_id: Mapped[str] = _cycle_fk()
    competency: Mapped[str] = mapped_column(String(10), nullable=False)

    p1: Mapped[Decimal | None] = _score()
    p2: Mapped[Decimal | None] = _score()
    p3: Mapped[Decimal | None] = _score()
    p4: Mapped[Decimal | None] = _score()


class TechnicalGrade(Base, TimestampMixin):
    """Learning-outcome tracking row (RA1..RA10) for a technical class."""

    __tablename__ = "technical_grades"
    __table_args__ = (
        Index(TECHNICAL_LEDGER_INDEX, "student_id", "class_id", "ra_code", unique=True),
    )

    id: Mapped[str] = uuid_pk()
    student_id: Mapped[str] = _student_fk()
    class_id: Mapped[str] = _class_fk()
    ra_code: Mapped[str] = mapped_column(String(10), nullable=False)
    value: Mapped[Decimal | None] = _score()
