# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic models (DTOs) shared by services and the API layer.

Kept free of ORM imports so that API schemas can be imported without
touching the database layer.
"""

from src.models.common import GradeStatus, GradingFormat, SubjectType, UserType
from src.models.enrollment import (
    BulkFailure,
    BulkLevelEnrollmentRequest,
    BulkLevelEnrollmentResult,
    BulkWithdrawalResult,
    LevelEnrollmentRequest,
    LevelEnrollmentResult,
    LevelReactivationResult,
    LevelWithdrawalResult,
    PromotionFailure,
    PromotionRequest,
    PromotionResult,
    StudentPromotionRequest,
)

__all__ = [
    # Enums
    "GradingFormat",
    "GradeStatus",
    "SubjectType",
    "UserType",
    # Enrollment
    "LevelEnrollmentRequest",
    "BulkLevelEnrollmentRequest",
    "LevelEnrollmentResult",
    "BulkLevelEnrollmentResult",
    "BulkFailure",
    "LevelWithdrawalResult",
    "LevelReactivationResult",
    "BulkWithdrawalResult",
    # Promotion
    "PromotionRequest",
    "StudentPromotionRequest",
    "PromotionResult",
    "PromotionFailure",
]
