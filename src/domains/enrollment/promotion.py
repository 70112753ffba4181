# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Promotion of approved students to the next level.

At the end of a school year, students who passed every class of their
level are enrolled in the next level for the new cycle. Each promoted
student goes through the regular level bootstrap in its own transaction.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.enrollment.exceptions import (
    AlreadyEnrolledError,
    EnrollmentError,
    NoSourceClassesError,
    SameCycleError,
)
from src.domains.enrollment.lookups import InstitutionLookups
from src.domains.enrollment.service import LevelEnrollmentService
from src.infrastructure.database.models import (
    AcademicCycle,
    Class,
    Enrollment,
    GradeRecord,
)
from src.models.common import GradeStatus
from src.models.enrollment import (
    LevelEnrollmentResult,
    PromotionFailure,
    PromotionResult,
)

logger = logging.getLogger(__name__)


class PromotionService(InstitutionLookups):
    """Service for promoting students between levels.

    Attributes:
        db: Async database session.
        enrollments: Level enrollment service sharing the session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize promotion service.

        Args:
            db: Async database session.
        """
        self.db = db
        self.enrollments = LevelEnrollmentService(db)

    async def promote_level(
        self,
        source_level_id: str,
        target_level_id: str,
        target_cycle_id: str,
        institution_id: str,
    ) -> PromotionResult:
        """Promote every approved student of a level.

        The source cycle is the most recent cycle holding classes of the
        source level. A student is approved when they have at least one
        grade record there and every record is APROBADO.

        Args:
            source_level_id: Level the students are leaving.
            target_level_id: Level to enroll them in.
            target_cycle_id: Cycle to enroll them in.
            institution_id: Caller's institution.

        Returns:
            Counts of promoted and already enrolled students, plus errors.

        Raises:
            LevelNotFoundError: If either level is not found.
            AcademicCycleNotFoundError: If the target cycle is not found.
            AcademicCycleClosedError: If the target cycle is closed.
            NoSourceClassesError: If the source level has no classes.
            SameCycleError: If the source cycle is the target cycle.
        """
        await self._get_level(
            source_level_id, institution_id, not_found_message="Source level not found"
        )
        await self._get_level(
            target_level_id, institution_id, not_found_message="Target level not found"
        )
        await self._get_open_cycle(target_cycle_id, institution_id)

        source_cycle_id = await self._get_source_cycle_id(source_level_id, institution_id)
        if source_cycle_id == target_cycle_id:
            raise SameCycleError(target_cycle_id)

        approved = await self._get_approved_students(source_level_id, source_cycle_id)

        # Release the read transaction before per-student commits
        await self.db.rollback()

        promoted = 0
        already_enrolled = 0
        errors: list[PromotionFailure] = []

        for student_id in approved:
            try:
                await self.enrollments.enroll_student_in_level(
                    student_id,
                    target_level_id,
                    institution_id,
                    cycle_id=target_cycle_id,
                )
                promoted += 1
            except AlreadyEnrolledError:
                already_enrolled += 1
            except EnrollmentError as e:
                errors.append(PromotionFailure(student_id=student_id, error=e.message))
            except SQLAlchemyError as e:
                logger.error(
                    "Promotion failed: student=%s, target_level=%s, error=%s",
                    student_id,
                    target_level_id,
                    e,
                )
                errors.append(PromotionFailure(student_id=student_id, error=str(e)))

        logger.info(
            "Promoted level: source=%s, target=%s, cycle=%s, approved=%d, "
            "promoted=%d, already_enrolled=%d, errors=%d",
            source_level_id,
            target_level_id,
            target_cycle_id,
            len(approved),
            promoted,
            already_enrolled,
            len(errors),
        )

        return PromotionResult(
            promoted=promoted,
            already_enrolled=already_enrolled,
            total_approved=len(approved),
            errors=errors,
        )

    async def promote_student(
        self,
        student_id: str,
        target_level_id: str,
        target_cycle_id: str,
        institution_id: str,
    ) -> LevelEnrollmentResult:
        """Enroll one student in a level for an explicit cycle.

        Approval is not checked; this is the administrative override.
        """
        result = await self.enrollments.enroll_student_in_level(
            student_id,
            target_level_id,
            institution_id,
            cycle_id=target_cycle_id,
        )
        logger.info(
            "Promoted student: student=%s, target_level=%s, cycle=%s",
            student_id,
            target_level_id,
            target_cycle_id,
        )
        return result

    async def _get_source_cycle_id(self, level_id: str, institution_id: str) -> str:
        """Get the most recent cycle with classes of the level.

        Raises:
            NoSourceClassesError: If the level has no classes.
        """
        query = (
            select(Class.academic_cycle_id)
            .join(AcademicCycle, Class.academic_cycle_id == AcademicCycle.id)
            .where(
                Class.level_id == level_id,
                Class.institution_id == institution_id,
            )
            .order_by(AcademicCycle.start_date.desc())
            .limit(1)
        )
        result = await self.db.execute(query)
        cycle_id = result.scalar_one_or_none()

        if cycle_id is None:
            raise NoSourceClassesError(level_id)

        return cycle_id

    async def _get_approved_students(self, level_id: str, cycle_id: str) -> list[str]:
        """Get students of a level and cycle whose grades are all approved.

        Returns:
            Approved student ids, sorted.
        """
        enrolled_query = (
            select(Enrollment.student_id)
            .join(Class, Enrollment.class_id == Class.id)
            .where(
                Class.level_id == level_id,
                Class.academic_cycle_id == cycle_id,
            )
            .distinct()
            .order_by(Enrollment.student_id)
        )
        result = await self.db.execute(enrolled_query)
        student_ids = list(result.scalars().all())

        grades_query = (
            select(GradeRecord.student_id, GradeRecord.status)
            .join(Class, GradeRecord.class_id == Class.id)
            .where(
                Class.level_id == level_id,
                GradeRecord.academic_cycle_id == cycle_id,
            )
        )
        result = await self.db.execute(grades_query)

        statuses: dict[str, list[str | None]] = defaultdict(list)
        for student_id, status in result.all():
            statuses[student_id].append(status)

        return [
            student_id
            for student_id in student_ids
            if statuses[student_id]
            and all(status == GradeStatus.APROBADO for status in statuses[student_id])
        ]
