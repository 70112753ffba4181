# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides level enrollment functionality including:
- Level enrollment with grade-tracking skeleton creation
- Level withdrawal and reactivation
- Promotion of approved students to the next level
"""

from src.domains.enrollment.exceptions import (
    AcademicCycleClosedError,
    AcademicCycleNotFoundError,
    AlreadyEnrolledError,
    EnrollmentConflictError,
    EnrollmentError,
    EnrollmentNotFoundError,
    EnrollmentValidationError,
    GradeLedgerExistsError,
    LevelNotFoundError,
    NoActiveCycleError,
    NoActiveEnrollmentsError,
    NoClassesForLevelError,
    NoInactiveEnrollmentsError,
    NoSourceClassesError,
    SameCycleError,
    StudentNotFoundError,
    WithdrawnEnrollmentError,
)
from src.domains.enrollment.promotion import PromotionService
from src.domains.enrollment.service import LevelEnrollmentService
from src.domains.enrollment.skeleton import (
    COMPETENCY_CODES,
    TECHNICAL_OUTCOME_CODES,
    GradingSkeletonStrategy,
    StandardSkeleton,
    TechnicalTrackSkeleton,
    strategy_for_format,
)
from src.domains.enrollment.withdrawal import LevelWithdrawalService

__all__ = [
    # Services
    "LevelEnrollmentService",
    "LevelWithdrawalService",
    "PromotionService",
    # Skeleton strategies
    "GradingSkeletonStrategy",
    "StandardSkeleton",
    "TechnicalTrackSkeleton",
    "strategy_for_format",
    "COMPETENCY_CODES",
    "TECHNICAL_OUTCOME_CODES",
    # Errors
    "EnrollmentError",
    "EnrollmentNotFoundError",
    "EnrollmentValidationError",
    "EnrollmentConflictError",
    "LevelNotFoundError",
    "StudentNotFoundError",
    "AcademicCycleNotFoundError",
    "NoActiveCycleError",
    "NoClassesForLevelError",
    "AcademicCycleClosedError",
    "NoActiveEnrollmentsError",
    "NoInactiveEnrollmentsError",
    "NoSourceClassesError",
    "SameCycleError",
    "AlreadyEnrolledError",
    "WithdrawnEnrollmentError",
    "GradeLedgerExistsError",
]
