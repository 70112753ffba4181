# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for grade-tracking skeleton strategies."""

from unittest.mock import MagicMock

import pytest

from src.domains.enrollment.skeleton import (
    COMPETENCY_CODES,
    TECHNICAL_OUTCOME_CODES,
    StandardSkeleton,
    TechnicalTrackSkeleton,
    strategy_for_format,
)
from src.infrastructure.database.models import CompetencyGrade, GradeRecord, TechnicalGrade
from src.models.common import GradingFormat, SubjectType


def _class(subject_type: str, class_id: str = "class-1"):
    class_ = MagicMock()
    class_.id = class_id
    class_.subject.subject_type = subject_type
    return class_


class TestCodes:
    """Tests for positional codes."""

    def test_competency_codes(self) -> None:
        assert COMPETENCY_CODES == ("CF1", "CF2", "CF3", "CF4", "CF5")

    def test_technical_outcome_codes(self) -> None:
        assert len(TECHNICAL_OUTCOME_CODES) == 10
        assert TECHNICAL_OUTCOME_CODES[0] == "RA1"
        assert TECHNICAL_OUTCOME_CODES[9] == "RA10"
        # RA10 sorts after RA9 positionally, not lexically
        assert TECHNICAL_OUTCOME_CODES.index("RA10") > TECHNICAL_OUTCOME_CODES.index("RA9")


class TestStrategyForFormat:
    """Tests for strategy selection."""

    def test_polytechnic_uses_technical_track(self) -> None:
        assert isinstance(strategy_for_format("POLITECNICO_DO"), TechnicalTrackSkeleton)

    def test_accepts_enum_members(self) -> None:
        assert isinstance(strategy_for_format(GradingFormat.POLITECNICO_DO), TechnicalTrackSkeleton)
        assert isinstance(strategy_for_format(GradingFormat.SECUNDARIA_DO), StandardSkeleton)

    @pytest.mark.parametrize(
        "grading_format",
        [f for f in GradingFormat if f is not GradingFormat.POLITECNICO_DO],
    )
    def test_other_formats_use_standard(self, grading_format: GradingFormat) -> None:
        assert isinstance(strategy_for_format(grading_format.value), StandardSkeleton)

    def test_unknown_format_uses_standard(self) -> None:
        assert isinstance(strategy_for_format("BACHILLERATO_XX"), StandardSkeleton)


class TestBuild:
    """Tests for building the rows of one class."""

    def test_standard_builds_record_and_competencies(self) -> None:
        skeleton = StandardSkeleton().build("student-1", _class(SubjectType.TECNICA), "cycle-1")

        assert isinstance(skeleton.grade_record, GradeRecord)
        assert skeleton.grade_record.student_id == "student-1"
        assert skeleton.grade_record.class_id == "class-1"
        assert skeleton.grade_record.academic_cycle_id == "cycle-1"

        assert all(isinstance(c, CompetencyGrade) for c in skeleton.competencies)
        assert [c.competency for c in skeleton.competencies] == list(COMPETENCY_CODES)
        assert skeleton.technical_grades == []

    def test_technical_track_general_subject(self) -> None:
        skeleton = TechnicalTrackSkeleton().build("student-1", _class("GENERAL"), "cycle-1")

        assert len(skeleton.competencies) == 5
        assert skeleton.technical_grades == []

    def test_technical_track_technical_subject(self) -> None:
        skeleton = TechnicalTrackSkeleton().build("student-1", _class("TECNICA"), "cycle-1")

        assert all(isinstance(t, TechnicalGrade) for t in skeleton.technical_grades)
        assert [t.ra_code for t in skeleton.technical_grades] == list(TECHNICAL_OUTCOME_CODES)
        assert all(t.value is None for t in skeleton.technical_grades)
        assert {t.student_id for t in skeleton.technical_grades} == {"student-1"}

    def test_builds_fresh_rows_each_call(self) -> None:
        strategy = StandardSkeleton()

        first = strategy.build("student-1", _class("GENERAL", "class-1"), "cycle-1")
        second = strategy.build("student-1", _class("GENERAL", "class-2"), "cycle-1")

        assert first.grade_record is not second.grade_record
        assert {c.class_id for c in second.competencies} == {"class-2"}
