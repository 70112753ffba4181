# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Level enrollment service.

This module provides the LevelEnrollmentService class for:
- Enrolling a student in every class of a level in one transaction
- Creating the grade-tracking skeleton of each enrolled class
- Bulk level enrollment with per-student isolation

A bootstrap either persists completely or not at all: the validation
reads, the duplicate check and every write run on the same session and
are committed once at the end. Any error rolls the whole call back.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domains.enrollment.exceptions import (
    AlreadyEnrolledError,
    EnrollmentError,
    EnrollmentValidationError,
    GradeLedgerExistsError,
    NoActiveCycleError,
    NoClassesForLevelError,
    WithdrawnEnrollmentError,
)
from src.domains.enrollment.lookups import InstitutionLookups
from src.domains.enrollment.skeleton import strategy_for_format
from src.infrastructure.database.models import (
    ACTIVE_ENROLLMENT_INDEX,
    COMPETENCY_LEDGER_INDEX,
    GRADE_LEDGER_INDEX,
    TECHNICAL_LEDGER_INDEX,
    AcademicCycle,
    Class,
    Enrollment,
)
from src.models.enrollment import (
    BulkFailure,
    BulkLevelEnrollmentResult,
    LevelEnrollmentResult,
)

logger = logging.getLogger(__name__)

GRADE_LEDGER_INDEXES = (GRADE_LEDGER_INDEX, COMPETENCY_LEDGER_INDEX, TECHNICAL_LEDGER_INDEX)


def is_active_enrollment_violation(error: IntegrityError) -> bool:
    """Check if an integrity error comes from the active-enrollment index."""
    return ACTIVE_ENROLLMENT_INDEX in str(error.orig)


def is_grade_ledger_violation(error: IntegrityError) -> bool:
    """Check if an integrity error comes from a grade-ledger index."""
    message = str(error.orig)
    return any(index in message for index in GRADE_LEDGER_INDEXES)


class LevelEnrollmentService(InstitutionLookups):
    """Service for enrolling students in whole levels.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize level enrollment service.

        Args:
            db: Async database session. The service commits or rolls
                back on it once per enrolled student.
        """
        self.db = db

    async def enroll_student_in_level(
        self,
        student_id: str,
        level_id: str,
        institution_id: str,
        cycle_id: str | None = None,
    ) -> LevelEnrollmentResult:
        """Enroll a student in every class of a level.

        Creates one enrollment, one grade record and five competency rows
        per class, plus ten technical outcome rows for technical classes
        under the polytechnic format, then points the student at the level.

        Args:
            student_id: Student identifier.
            level_id: Target level identifier.
            institution_id: Caller's institution, from tenant resolution.
            cycle_id: Explicit target cycle. Defaults to the active cycle.

        Returns:
            Counts of the rows created.

        Raises:
            LevelNotFoundError: If level not found in the institution.
            StudentNotFoundError: If student not found in the institution.
            AcademicCycleNotFoundError: If the explicit cycle is not found.
            AcademicCycleClosedError: If the explicit cycle is closed.
            NoActiveCycleError: If no cycle is active.
            NoClassesForLevelError: If the level has no classes in the cycle.
            AlreadyEnrolledError: If already actively enrolled in any class.
            WithdrawnEnrollmentError: If withdrawn from any class of the level
                in this cycle; use reactivation instead.
        """
        try:
            result = await self._bootstrap(student_id, level_id, institution_id, cycle_id)
            await self.db.commit()
        except EnrollmentValidationError as e:
            await self.db.rollback()
            logger.debug(
                "Level enrollment rejected: student=%s, level=%s, reason=%s",
                student_id,
                level_id,
                e.message,
            )
            raise
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Enrolled student in level: student=%s, level=%s, classes=%d, "
            "competencies=%d, technical=%d",
            student_id,
            level_id,
            result.classes_enrolled,
            result.competencies_created,
            result.technical_grades_created,
        )

        return result

    async def bulk_enroll_in_level(
        self,
        student_ids: list[str],
        level_id: str,
        institution_id: str,
    ) -> BulkLevelEnrollmentResult:
        """Enroll several students in a level, one transaction each.

        Args:
            student_ids: Student identifiers.
            level_id: Target level identifier.
            institution_id: Caller's institution.

        Returns:
            Per-student results and failures.
        """
        enrolled: list[LevelEnrollmentResult] = []
        failed: list[BulkFailure] = []

        for student_id in student_ids:
            try:
                enrolled.append(
                    await self.enroll_student_in_level(student_id, level_id, institution_id)
                )
            except EnrollmentError as e:
                failed.append(BulkFailure(student_id=student_id, error=e.message))
            except SQLAlchemyError as e:
                logger.error(
                    "Level enrollment failed: student=%s, level=%s, error=%s",
                    student_id,
                    level_id,
                    e,
                )
                failed.append(BulkFailure(student_id=student_id, error=str(e)))

        logger.info(
            "Bulk level enrollment: level=%s, enrolled=%d, failed=%d",
            level_id,
            len(enrolled),
            len(failed),
        )

        return BulkLevelEnrollmentResult(enrolled=enrolled, failed=failed)

    async def _bootstrap(
        self,
        student_id: str,
        level_id: str,
        institution_id: str,
        cycle_id: str | None,
    ) -> LevelEnrollmentResult:
        """Run validation, duplicate check and writes without committing."""
        level = await self._get_level(level_id, institution_id, with_institution=True)
        student = await self._get_student(student_id, institution_id)

        if cycle_id is None:
            cycle = await self._get_active_cycle(institution_id)
        else:
            cycle = await self._get_open_cycle(cycle_id, institution_id)

        classes = await self._get_level_classes(level_id, cycle.id, institution_id)
        await self._ensure_not_enrolled(student_id, [c.id for c in classes])

        strategy = strategy_for_format(level.effective_grading_format)

        competencies_created = 0
        technical_grades_created = 0

        for class_ in classes:
            await self._create_enrollment(student_id, class_.id)

            skeleton = strategy.build(student_id, class_, cycle.id)
            self.db.add(skeleton.grade_record)
            self.db.add_all(skeleton.competencies)
            competencies_created += len(skeleton.competencies)

            if skeleton.technical_grades:
                self.db.add_all(skeleton.technical_grades)
                technical_grades_created += len(skeleton.technical_grades)

        await self._flush_writes(student_id)
        student.current_level_id = level_id

        return LevelEnrollmentResult(
            student_id=student_id,
            level_id=level_id,
            classes_enrolled=len(classes),
            grade_records_created=len(classes),
            competencies_created=competencies_created,
            technical_grades_created=technical_grades_created,
        )

    async def _get_active_cycle(self, institution_id: str) -> AcademicCycle:
        """Get the active academic cycle of the institution.

        Raises:
            NoActiveCycleError: If none is active.
        """
        query = (
            select(AcademicCycle)
            .where(
                AcademicCycle.institution_id == institution_id,
                AcademicCycle.is_active.is_(True),
            )
            .order_by(AcademicCycle.start_date.desc())
            .limit(1)
        )
        result = await self.db.execute(query)
        cycle = result.scalar_one_or_none()

        if not cycle:
            raise NoActiveCycleError(institution_id)

        return cycle

    async def _get_level_classes(
        self,
        level_id: str,
        cycle_id: str,
        institution_id: str,
    ) -> list[Class]:
        """Get the classes of a level in a cycle, subjects loaded.

        Raises:
            NoClassesForLevelError: If there are none.
        """
        query = (
            select(Class)
            .options(selectinload(Class.subject))
            .where(
                Class.level_id == level_id,
                Class.academic_cycle_id == cycle_id,
                Class.institution_id == institution_id,
            )
            .order_by(Class.created_at, Class.id)
        )
        result = await self.db.execute(query)
        classes = list(result.scalars().all())

        if not classes:
            raise NoClassesForLevelError(level_id, cycle_id)

        return classes

    async def _ensure_not_enrolled(self, student_id: str, class_ids: list[str]) -> None:
        """Reject the bootstrap if the student already holds a target class.

        An active enrollment is a duplicate. An inactive one means the
        student was withdrawn and the class still carries their grade
        ledger for the cycle, so a new skeleton would double it.

        Raises:
            AlreadyEnrolledError: If an active enrollment exists.
            WithdrawnEnrollmentError: If only withdrawn enrollments exist.
        """
        query = select(Enrollment.class_id, Enrollment.is_active).where(
            Enrollment.student_id == student_id,
            Enrollment.class_id.in_(class_ids),
        )
        result = await self.db.execute(query)
        rows = result.all()

        active = list(dict.fromkeys(class_id for class_id, is_active in rows if is_active))
        if active:
            raise AlreadyEnrolledError(student_id, active)

        withdrawn = list(dict.fromkeys(class_id for class_id, _ in rows))
        if withdrawn:
            raise WithdrawnEnrollmentError(student_id, withdrawn)

    async def _create_enrollment(self, student_id: str, class_id: str) -> Enrollment:
        """Write one enrollment and flush it.

        Flushing here surfaces a concurrent duplicate at the enrollment
        write instead of at commit.
        """
        enrollment = Enrollment(student_id=student_id, class_id=class_id, is_active=True)
        self.db.add(enrollment)
        await self._flush_writes(student_id, class_id)
        return enrollment

    async def _flush_writes(self, student_id: str, class_id: str | None = None) -> None:
        """Flush pending writes, translating index violations to conflicts.

        Raises:
            AlreadyEnrolledError: If the active-enrollment index rejects a row.
            GradeLedgerExistsError: If a grade-ledger index rejects a row.
        """
        try:
            await self.db.flush()
        except IntegrityError as e:
            if is_active_enrollment_violation(e):
                logger.warning(
                    "Concurrent duplicate enrollment rejected by storage: student=%s, class=%s",
                    student_id,
                    class_id,
                )
                raise AlreadyEnrolledError(student_id, [class_id] if class_id else None) from e
            if is_grade_ledger_violation(e):
                logger.warning("Duplicate grade ledger rejected by storage: student=%s", student_id)
                raise GradeLedgerExistsError(student_id) from e
            raise
