# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the Escolaris platform database.

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    generate_uuid,
)
from src.infrastructure.database.models.grading import (
    ACTIVE_ENROLLMENT_INDEX,
    COMPETENCY_LEDGER_INDEX,
    GRADE_LEDGER_INDEX,
    TECHNICAL_LEDGER_INDEX,
    CompetencyGrade,
    Enrollment,
    GradeRecord,
    TechnicalGrade,
)
from src.infrastructure.database.models.institution import (
    AcademicCycle,
    Class,
    Institution,
    Level,
    Subject,
)
from src.infrastructure.database.models.user import User

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "SoftDeleteMixin",
    "generate_uuid",
    # Academic structure
    "Institution",
    "Level",
    "AcademicCycle",
    "Subject",
    "Class",
    # Users
    "User",
    # Enrollment and grading
    "Enrollment",
    "GradeRecord",
    "CompetencyGrade",
    "TechnicalGrade",
    "ACTIVE_ENROLLMENT_INDEX",
    "GRADE_LEDGER_INDEX",
    "COMPETENCY_LEDGER_INDEX",
    "TECHNICAL_LEDGER_INDEX",
]
