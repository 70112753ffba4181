# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant-scoped lookups shared by the enrollment services.

Every query filters on ``institution_id``; a row owned by another
institution is reported exactly like a missing one.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from src.domains.enrollment.exceptions import (
    AcademicCycleClosedError,
    AcademicCycleNotFoundError,
    LevelNotFoundError,
    StudentNotFoundError,
)
from src.infrastructure.database.models import AcademicCycle, Level, User
from src.models.common import UserType


class InstitutionLookups:
    """Mixin with lookups for levels, students and cycles.

    Attributes:
        db: Async database session.
    """

    db: AsyncSession

    async def _get_level(
        self,
        level_id: str,
        institution_id: str,
        with_institution: bool = False,
        not_found_message: str = "Level not found",
    ) -> Level:
        """Get a level of the institution.

        Args:
            level_id: Level identifier.
            institution_id: Caller's institution.
            with_institution: Eager-load the institution, needed for
                ``Level.effective_grading_format``.
            not_found_message: Message for the raised error.

        Returns:
            Level model instance.

        Raises:
            LevelNotFoundError: If not found in the institution.
        """
        query = select(Level).where(
            Level.id == level_id,
            Level.institution_id == institution_id,
        )
        if with_institution:
            query = query.options(joinedload(Level.institution))

        result = await self.db.execute(query)
        level = result.scalar_one_or_none()

        if not level:
            raise LevelNotFoundError(level_id, not_found_message)

        return level

    async def _get_student(self, student_id: str, institution_id: str) -> User:
        """Get a student of the institution.

        Users with another role and soft-deleted users count as absent.

        Raises:
            StudentNotFoundError: If not found.
        """
        query = select(User).where(
            User.id == student_id,
            User.institution_id == institution_id,
            User.user_type == UserType.STUDENT.value,
            User.deleted_at.is_(None),
        )
        result = await self.db.execute(query)
        student = result.scalar_one_or_none()

        if not student:
            raise StudentNotFoundError(student_id)

        return student

    async def _get_open_cycle(self, cycle_id: str, institution_id: str) -> AcademicCycle:
        """Get an academic cycle that still accepts enrollments.

        Raises:
            AcademicCycleNotFoundError: If not found in the institution.
            AcademicCycleClosedError: If the cycle is closed.
        """
        query = select(AcademicCycle).where(
            AcademicCycle.id == cycle_id,
            AcademicCycle.institution_id == institution_id,
        )
        result = await self.db.execute(query)
        cycle = result.scalar_one_or_none()

        if not cycle:
            raise AcademicCycleNotFoundError(cycle_id)

        if cycle.is_closed:
            raise AcademicCycleClosedError(cycle_id)

        return cycle
