# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade-tracking skeleton generation.

Every class a student is enrolled in receives one empty GradeRecord and
five CompetencyGrade rows. Under the polytechnic format, classes of a
technical subject additionally receive ten TechnicalGrade rows.

Which rows a class receives is decided by a strategy selected from the
effective grading format of the level:

    strategy = strategy_for_format(level.effective_grading_format)
    skeleton = strategy.build(student_id, class_, cycle_id)

Codes are generated by position (CF1..CF5, RA1..RA10). Report cards and
grade sheets key on these strings, so the order and count are fixed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from src.infrastructure.database.models import (
    Class,
    CompetencyGrade,
    GradeRecord,
    TechnicalGrade,
)
from src.models.common import GradingFormat, SubjectType

COMPETENCY_COUNT = 5
TECHNICAL_OUTCOME_COUNT = 10

COMPETENCY_CODES: tuple[str, ...] = tuple(f"CF{i}" for i in range(1, COMPETENCY_COUNT + 1))
TECHNICAL_OUTCOME_CODES: tuple[str, ...] = tuple(
    f"RA{i}" for i in range(1, TECHNICAL_OUTCOME_COUNT + 1)
)


@dataclass
class ClassSkeleton:
    """Unsaved grade-tracking rows for one enrolled class."""

    grade_record: GradeRecord
    competencies: list[CompetencyGrade]
    technical_grades: list[TechnicalGrade] = field(default_factory=list)


class GradingSkeletonStrategy(ABC):
    """Decides which grade-tracking rows a class receives."""

    name: str = ""

    @abstractmethod
    def includes_technical_outcomes(self, subject_type: str) -> bool:
        """Check whether a class of the given subject type tracks RA codes."""

    def build(self, student_id: str, class_: Class, cycle_id: str) -> ClassSkeleton:
        """Build the rows for one class.

        Args:
            student_id: Enrolled student.
            class_: Target class, with its subject loaded.
            cycle_id: Academic cycle the grades belong to.

        Returns:
            ClassSkeleton with unsaved ORM instances.
        """
        grade_record = GradeRecord(
            student_id=student_id,
            class_id=class_.id,
            academic_cycle_id=cycle_id,
        )
        competencies = [
            CompetencyGrade(
                student_id=student_id,
                class_id=class_.id,
                academic_cycle_id=cycle_id,
                competency=code,
            )
            for code in COMPETENCY_CODES
        ]

        technical_grades = []
        if self.includes_technical_outcomes(class_.subject.subject_type):
            technical_grades = [
                TechnicalGrade(student_id=student_id, class_id=class_.id, ra_code=code)
                for code in TECHNICAL_OUTCOME_CODES
            ]

        return ClassSkeleton(
            grade_record=grade_record,
            competencies=competencies,
            technical_grades=technical_grades,
        )


class StandardSkeleton(GradingSkeletonStrategy):
    """Competencies only, for every subject."""

    name = "standard"

    def includes_technical_outcomes(self, subject_type: str) -> bool:
        return False


class TechnicalTrackSkeleton(GradingSkeletonStrategy):
    """Competencies for every subject, learning outcomes for technical ones."""

    name = "technical_track"

    def includes_technical_outcomes(self, subject_type: str) -> bool:
        return subject_type == SubjectType.TECNICA


_STANDARD = StandardSkeleton()

_STRATEGIES: dict[str, GradingSkeletonStrategy] = {
    GradingFormat.POLITECNICO_DO.value: TechnicalTrackSkeleton(),
}


def strategy_for_format(grading_format: str) -> GradingSkeletonStrategy:
    """Get the skeleton strategy for a grading format.

    Formats without a dedicated strategy use the standard one.

    Args:
        grading_format: GradingFormat member or its stored string value.

    Returns:
        The strategy instance for the format.
    """
    if isinstance(grading_format, GradingFormat):
        grading_format = grading_format.value
    return _STRATEGIES.get(grading_format, _STANDARD)
