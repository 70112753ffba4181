# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Level enrollment API endpoints.

This module provides endpoints for level-wide enrollment:
- POST /levels/{level_id} - Enroll a student in every class of a level
- POST /levels/{level_id}/bulk - Enroll several students
- POST /levels/{level_id}/withdraw - Withdraw a student from a level
- POST /levels/{level_id}/withdraw/bulk - Withdraw several students
- POST /levels/{level_id}/reactivate - Reactivate a withdrawn student
- POST /promotions - Promote the approved students of a level
- POST /promotions/students - Promote one student without grade checks

The institution always comes from tenant resolution, never from the
request body. EnrollmentError subclasses are translated to 404/400/409
by the handler registered in create_app. Path and body ids are typed as
UUID, so malformed ids fail validation with 422.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import DB, CurrentInstitution
from src.domains.enrollment import (
    LevelEnrollmentService,
    LevelWithdrawalService,
    PromotionService,
)
from src.models.enrollment import (
    BulkLevelEnrollmentRequest,
    BulkLevelEnrollmentResult,
    BulkWithdrawalResult,
    LevelEnrollmentRequest,
    LevelEnrollmentResult,
    LevelReactivationResult,
    LevelWithdrawalResult,
    PromotionRequest,
    PromotionResult,
    StudentPromotionRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_enrollment_service(db: AsyncSession) -> LevelEnrollmentService:
    return LevelEnrollmentService(db)


def _get_withdrawal_service(db: AsyncSession) -> LevelWithdrawalService:
    return LevelWithdrawalService(db)


def _get_promotion_service(db: AsyncSession) -> PromotionService:
    return PromotionService(db)


# ============================================================================
# Level Enrollment Endpoints
# ============================================================================


@router.post(
    "/levels/{level_id}",
    response_model=LevelEnrollmentResult,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll student in level",
    description=(
        "Enroll a student in every class of the level for the active cycle "
        "and create the grade-tracking records of each class."
    ),
)
async def enroll_in_level(
    level_id: UUID,
    data: LevelEnrollmentRequest,
    institution: CurrentInstitution,
    db: DB,
) -> LevelEnrollmentResult:
    """Enroll a student in a level.

    Args:
        level_id: Level identifier.
        data: Enrollment request.
        institution: Resolved institution.
        db: Database session.

    Returns:
        Counts of the created records.
    """
    service = _get_enrollment_service(db)
    return await service.enroll_student_in_level(
        student_id=str(data.student_id),
        level_id=str(level_id),
        institution_id=institution.id,
    )


@router.post(
    "/levels/{level_id}/bulk",
    response_model=BulkLevelEnrollmentResult,
    summary="Bulk enroll students in level",
)
async def bulk_enroll_in_level(
    level_id: UUID,
    data: BulkLevelEnrollmentRequest,
    institution: CurrentInstitution,
    db: DB,
) -> BulkLevelEnrollmentResult:
    """Enroll several students in a level, one transaction per student."""
    service = _get_enrollment_service(db)
    return await service.bulk_enroll_in_level(
        student_ids=[str(student_id) for student_id in data.student_ids],
        level_id=str(level_id),
        institution_id=institution.id,
    )


# ============================================================================
# Withdrawal Endpoints
# ============================================================================


@router.post(
    "/levels/{level_id}/withdraw",
    response_model=LevelWithdrawalResult,
    summary="Withdraw student from level",
)
async def withdraw_from_level(
    level_id: UUID,
    data: LevelEnrollmentRequest,
    institution: CurrentInstitution,
    db: DB,
) -> LevelWithdrawalResult:
    """Deactivate a student's enrollments in a level. Grades are kept."""
    service = _get_withdrawal_service(db)
    return await service.withdraw_from_level(
        student_id=str(data.student_id),
        level_id=str(level_id),
        institution_id=institution.id,
    )


@router.post(
    "/levels/{level_id}/withdraw/bulk",
    response_model=BulkWithdrawalResult,
    summary="Bulk withdraw students from level",
)
async def bulk_withdraw_from_level(
    level_id: UUID,
    data: BulkLevelEnrollmentRequest,
    institution: CurrentInstitution,
    db: DB,
) -> BulkWithdrawalResult:
    """Withdraw several students from a level."""
    service = _get_withdrawal_service(db)
    return await service.bulk_withdraw_from_level(
        student_ids=[str(student_id) for student_id in data.student_ids],
        level_id=str(level_id),
        institution_id=institution.id,
    )


@router.post(
    "/levels/{level_id}/reactivate",
    response_model=LevelReactivationResult,
    summary="Reactivate student in level",
)
async def reactivate_in_level(
    level_id: UUID,
    data: LevelEnrollmentRequest,
    institution: CurrentInstitution,
    db: DB,
) -> LevelReactivationResult:
    """Reactivate a student's withdrawn enrollments in a level."""
    service = _get_withdrawal_service(db)
    return await service.reactivate_in_level(
        student_id=str(data.student_id),
        level_id=str(level_id),
        institution_id=institution.id,
    )


# ============================================================================
# Promotion Endpoints
# ============================================================================


@router.post(
    "/promotions",
    response_model=PromotionResult,
    summary="Promote level",
    description=(
        "Enroll every student who passed all classes of the source level "
        "into the target level for the target cycle."
    ),
)
async def promote_level(
    data: PromotionRequest,
    institution: CurrentInstitution,
    db: DB,
) -> PromotionResult:
    """Promote the approved students of a level.

    Args:
        data: Source level, target level and target cycle.
        institution: Resolved institution.
        db: Database session.

    Returns:
        Promotion counts and per-student errors.
    """
    logger.info(
        "Promoting level: source=%s, target=%s, cycle=%s, institution=%s",
        data.source_level_id,
        data.target_level_id,
        data.target_cycle_id,
        institution.id,
    )

    service = _get_promotion_service(db)
    return await service.promote_level(
        source_level_id=str(data.source_level_id),
        target_level_id=str(data.target_level_id),
        target_cycle_id=str(data.target_cycle_id),
        institution_id=institution.id,
    )


@router.post(
    "/promotions/students",
    response_model=LevelEnrollmentResult,
    status_code=status.HTTP_201_CREATED,
    summary="Promote student",
    description="Enroll one student in the target level for the target cycle without checking grades.",
)
async def promote_student(
    data: StudentPromotionRequest,
    institution: CurrentInstitution,
    db: DB,
) -> LevelEnrollmentResult:
    """Promote one student as an administrative decision."""
    service = _get_promotion_service(db)
    return await service.promote_student(
        student_id=str(data.student_id),
        target_level_id=str(data.target_level_id),
        target_cycle_id=str(data.target_cycle_id),
        institution_id=institution.id,
    )
