# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Level withdrawal and reactivation.

Withdrawing deactivates a student's enrollments in every class of a
level, across all cycles. Grade rows are kept so that a later
reactivation restores the student's record unchanged.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.enrollment.exceptions import (
    AlreadyEnrolledError,
    EnrollmentError,
    NoActiveEnrollmentsError,
    NoInactiveEnrollmentsError,
)
from src.domains.enrollment.lookups import InstitutionLookups
from src.domains.enrollment.service import is_active_enrollment_violation
from src.infrastructure.database.models import Class, Enrollment
from src.models.enrollment import (
    BulkFailure,
    BulkWithdrawalResult,
    LevelReactivationResult,
    LevelWithdrawalResult,
)

logger = logging.getLogger(__name__)


class LevelWithdrawalService(InstitutionLookups):
    """Service for withdrawing students from levels and reactivating them.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def withdraw_from_level(
        self,
        student_id: str,
        level_id: str,
        institution_id: str,
    ) -> LevelWithdrawalResult:
        """Deactivate a student's active enrollments in a level.

        Args:
            student_id: Student identifier.
            level_id: Level identifier.
            institution_id: Caller's institution.

        Returns:
            Number of enrollments deactivated.

        Raises:
            StudentNotFoundError: If student not found in the institution.
            LevelNotFoundError: If level not found in the institution.
            NoActiveEnrollmentsError: If there is nothing to withdraw.
        """
        try:
            await self._get_student(student_id, institution_id)
            await self._get_level(level_id, institution_id)

            enrollments = await self._get_level_enrollments(
                student_id, level_id, institution_id, active=True
            )
            if not enrollments:
                raise NoActiveEnrollmentsError(student_id, level_id)

            for enrollment in enrollments:
                enrollment.is_active = False

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Withdrew student from level: student=%s, level=%s, enrollments=%d",
            student_id,
            level_id,
            len(enrollments),
        )

        return LevelWithdrawalResult(
            student_id=student_id,
            level_id=level_id,
            deactivated=len(enrollments),
        )

    async def bulk_withdraw_from_level(
        self,
        student_ids: list[str],
        level_id: str,
        institution_id: str,
    ) -> BulkWithdrawalResult:
        """Withdraw several students from a level.

        The level is verified once up front; per-student errors are
        collected instead of raised.

        Raises:
            LevelNotFoundError: If level not found in the institution.
        """
        await self._get_level(level_id, institution_id)

        succeeded: list[LevelWithdrawalResult] = []
        failed: list[BulkFailure] = []

        for student_id in student_ids:
            try:
                succeeded.append(
                    await self.withdraw_from_level(student_id, level_id, institution_id)
                )
            except EnrollmentError as e:
                failed.append(BulkFailure(student_id=student_id, error=e.message))

        logger.info(
            "Bulk level withdrawal: level=%s, withdrawn=%d, failed=%d",
            level_id,
            len(succeeded),
            len(failed),
        )

        return BulkWithdrawalResult(succeeded=succeeded, failed=failed)

    async def reactivate_in_level(
        self,
        student_id: str,
        level_id: str,
        institution_id: str,
    ) -> LevelReactivationResult:
        """Reactivate a student's inactive enrollments in a level.

        At most one enrollment per class is restored: the most recently
        created one. Earlier withdrawn rows of the same class keep their
        inactive state as history.

        Args:
            student_id: Student identifier.
            level_id: Level identifier.
            institution_id: Caller's institution.

        Returns:
            Number of enrollments reactivated.

        Raises:
            StudentNotFoundError: If student not found in the institution.
            LevelNotFoundError: If level not found in the institution.
            NoInactiveEnrollmentsError: If there is nothing to reactivate.
            AlreadyEnrolledError: If a class already has an active enrollment.
        """
        try:
            await self._get_student(student_id, institution_id)
            await self._get_level(level_id, institution_id)

            inactive = await self._get_level_enrollments(
                student_id, level_id, institution_id, active=False
            )
            if not inactive:
                raise NoInactiveEnrollmentsError(student_id, level_id)

            # Newest first; older rows of a class stay withdrawn
            latest: dict[str, Enrollment] = {}
            for enrollment in inactive:
                latest.setdefault(enrollment.class_id, enrollment)
            enrollments = list(latest.values())

            for enrollment in enrollments:
                enrollment.is_active = True

            await self.db.flush()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not is_active_enrollment_violation(e):
                raise
            logger.warning(
                "Reactivation rejected by active-enrollment index: student=%s, level=%s",
                student_id,
                level_id,
            )
            raise AlreadyEnrolledError(student_id) from e
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Reactivated student in level: student=%s, level=%s, enrollments=%d",
            student_id,
            level_id,
            len(enrollments),
        )

        return LevelReactivationResult(
            student_id=student_id,
            level_id=level_id,
            reactivated=len(enrollments),
        )

    async def _get_level_enrollments(
        self,
        student_id: str,
        level_id: str,
        institution_id: str,
        active: bool,
    ) -> list[Enrollment]:
        """Get a student's enrollments in any class of a level, newest first."""
        query = (
            select(Enrollment)
            .join(Class, Enrollment.class_id == Class.id)
            .where(
                Enrollment.student_id == student_id,
                Enrollment.is_active.is_(active),
                Class.level_id == level_id,
                Class.institution_id == institution_id,
            )
            .order_by(Enrollment.enrolled_at.desc(), Enrollment.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
