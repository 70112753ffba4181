# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database models.

Tests model definitions, indexes, and helper properties.
"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex

from src.infrastructure.database.models import (
    ACTIVE_ENROLLMENT_INDEX,
    COMPETENCY_LEDGER_INDEX,
    GRADE_LEDGER_INDEX,
    TECHNICAL_LEDGER_INDEX,
    Base,
    Class,
    CompetencyGrade,
    Enrollment,
    GradeRecord,
    Institution,
    Level,
    TechnicalGrade,
    User,
    generate_uuid,
)
from src.infrastructure.database.models.base import SoftDeleteMixin, TimestampMixin


class TestBase:
    """Test base model functionality."""

    def test_base_inherits_declarative_base(self):
        """Verify Base is a declarative base."""
        assert hasattr(Base, "metadata")
        assert hasattr(Base, "registry")

    def test_all_tables_registered(self):
        """Verify every table is on the shared metadata."""
        assert set(Base.metadata.tables) == {
            "institutions",
            "levels",
            "academic_cycles",
            "subjects",
            "classes",
            "users",
            "enrollments",
            "grade_records",
            "competency_grades",
            "technical_grades",
        }

    def test_mixins(self):
        """Verify mixins declare their columns."""
        assert hasattr(TimestampMixin, "created_at")
        assert hasattr(TimestampMixin, "updated_at")
        assert hasattr(SoftDeleteMixin, "deleted_at")

    def test_generate_uuid(self):
        """Verify generated ids are distinct UUID strings."""
        first, second = generate_uuid(), generate_uuid()

        assert first != second
        assert str(UUID(first)) == first

    def test_primary_keys_default_to_uuid(self):
        """Verify ids are generated application-side."""
        for model in (Enrollment, GradeRecord, CompetencyGrade, TechnicalGrade):
            default = model.__table__.c.id.default
            assert default is not None
            assert default.is_callable


class TestEnrollmentModel:
    """Test the enrollment table."""

    def _index(self, name):
        return next(i for i in Enrollment.__table__.indexes if i.name == name)

    def test_active_enrollment_index_is_partial_unique(self):
        """Verify at most one active enrollment per student and class."""
        index = self._index(ACTIVE_ENROLLMENT_INDEX)

        assert index.unique is True
        assert [c.name for c in index.columns] == ["student_id", "class_id"]
        assert str(index.dialect_options["postgresql"]["where"]) == "is_active"

    def test_active_enrollment_index_ddl(self):
        """Verify the generated PostgreSQL DDL carries the predicate."""
        ddl = str(CreateIndex(self._index(ACTIVE_ENROLLMENT_INDEX)).compile(
            dialect=postgresql.dialect()
        ))

        assert "CREATE UNIQUE INDEX uq_enrollments_active_student_class" in ddl
        assert "WHERE is_active" in ddl

    def test_is_active_defaults_true(self):
        """Verify new enrollments are active."""
        assert Enrollment.__table__.c.is_active.default.arg is True


class TestGradeLedgerIndexes:
    """Test the one-ledger-per-class-and-cycle indexes."""

    @staticmethod
    def _index(model, name):
        return next(i for i in model.__table__.indexes if i.name == name)

    def test_grade_record_unique_per_student_class_cycle(self):
        index = self._index(GradeRecord, GRADE_LEDGER_INDEX)

        assert index.unique is True
        assert [c.name for c in index.columns] == ["student_id", "class_id", "academic_cycle_id"]
        assert index.dialect_options["postgresql"]["where"] is None

    def test_competency_unique_per_code(self):
        index = self._index(CompetencyGrade, COMPETENCY_LEDGER_INDEX)

        assert index.unique is True
        assert [c.name for c in index.columns] == [
            "student_id",
            "class_id",
            "academic_cycle_id",
            "competency",
        ]

    def test_technical_outcome_unique_per_code(self):
        index = self._index(TechnicalGrade, TECHNICAL_LEDGER_INDEX)

        assert index.unique is True
        assert [c.name for c in index.columns] == ["student_id", "class_id", "ra_code"]


class TestLevelModel:
    """Test level helpers."""

    def test_effective_grading_format_prefers_level(self):
        """Verify the level format overrides the institution format."""
        institution = Institution(name="Liceo", slug="liceo", grading_format="SECUNDARIA_DO")
        level = Level(name="4to", grading_format="POLITECNICO_DO", institution=institution)

        assert level.effective_grading_format == "POLITECNICO_DO"

    def test_effective_grading_format_falls_back_to_institution(self):
        """Verify levels without a format inherit the institution's."""
        institution = Institution(name="Liceo", slug="liceo", grading_format="POLITECNICO_DO")
        level = Level(name="4to", grading_format=None, institution=institution)

        assert level.effective_grading_format == "POLITECNICO_DO"


class TestUserModel:
    """Test user helpers."""

    def test_full_name(self):
        user = User(email="ana@liceo.do", first_name="Ana", last_name="Pérez", user_type="student")

        assert user.full_name == "Ana Pérez"

    def test_is_deleted(self):
        user = User(email="ana@liceo.do", first_name="Ana", last_name="Pérez", user_type="student")
        assert user.is_deleted is False

        user.deleted_at = datetime.now(timezone.utc)
        assert user.is_deleted is True


class TestClassModel:
    """Test class relationships used by the enrollment bootstrap."""

    def test_class_has_subject_relationship(self):
        assert "subject" in Class.__mapper__.relationships

    def test_class_indexed_by_level_and_cycle(self):
        names = {i.name for i in Class.__table__.indexes}

        assert "ix_classes_level_cycle" in names
