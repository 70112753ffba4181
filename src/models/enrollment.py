# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request and result models.

Field names are snake_case in Python; the wire format uses the camelCase
keys consumed by the web client (``estudianteId``, ``clasesInscritas``...).
Models accept either form on input; dump with ``by_alias=True`` (FastAPI
response models do this by default). Request ids are UUIDs, so FastAPI
rejects malformed ones with 422 before any query runs.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    """Base model that accepts field names or camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Request Models
# ============================================================================


class LevelEnrollmentRequest(_CamelModel):
    """Request to enroll one student in every class of a level."""

    student_id: UUID = Field(alias="studentId", description="Student ID")


class BulkLevelEnrollmentRequest(_CamelModel):
    """Request to enroll (or withdraw) several students at once."""

    student_ids: list[UUID] = Field(
        alias="studentIds",
        min_length=1,
        description="Student IDs, processed independently",
    )


class PromotionRequest(_CamelModel):
    """Request to promote the approved students of a level."""

    source_level_id: UUID = Field(alias="sourceLevelId", description="Level being closed out")
    target_level_id: UUID = Field(alias="targetLevelId", description="Level to enroll into")
    target_cycle_id: UUID = Field(alias="targetCycleId", description="Cycle to enroll into")


class StudentPromotionRequest(_CamelModel):
    """Request to promote one student regardless of grades."""

    student_id: UUID = Field(alias="studentId", description="Student ID")
    target_level_id: UUID = Field(alias="targetLevelId", description="Level to enroll into")
    target_cycle_id: UUID = Field(alias="targetCycleId", description="Cycle to enroll into")


# ============================================================================
# Result Models
# ============================================================================


class LevelEnrollmentResult(_CamelModel):
    """Counts of everything one level bootstrap created."""

    student_id: str = Field(alias="estudianteId")
    level_id: str = Field(alias="nivelId")
    classes_enrolled: int = Field(alias="clasesInscritas", ge=0)
    grade_records_created: int = Field(alias="calificacionesCreadas", ge=0)
    competencies_created: int = Field(alias="competenciasCreadas", ge=0)
    technical_grades_created: int = Field(alias="tecnicasCreadas", ge=0)


class BulkFailure(_CamelModel):
    """One failed student in a bulk operation."""

    student_id: str = Field(alias="studentId")
    error: str


class BulkLevelEnrollmentResult(_CamelModel):
    """Outcome of a bulk level enrollment."""

    enrolled: list[LevelEnrollmentResult] = Field(default_factory=list)
    failed: list[BulkFailure] = Field(default_factory=list)


class LevelWithdrawalResult(_CamelModel):
    """Outcome of withdrawing a student from a level."""

    student_id: str = Field(alias="estudianteId")
    level_id: str = Field(alias="nivelId")
    deactivated: int = Field(alias="inscripcionesDesactivadas", ge=0)


class LevelReactivationResult(_CamelModel):
    """Outcome of reactivating a student's enrollments in a level."""

    student_id: str = Field(alias="estudianteId")
    level_id: str = Field(alias="nivelId")
    reactivated: int = Field(alias="inscripcionesReactivadas", ge=0)


class BulkWithdrawalResult(_CamelModel):
    """Outcome of a bulk withdrawal."""

    succeeded: list[LevelWithdrawalResult] = Field(alias="exitosos", default_factory=list)
    failed: list[BulkFailure] = Field(alias="fallidos", default_factory=list)


class PromotionFailure(_CamelModel):
    """A student whose promotion failed for a reason other than a duplicate."""

    student_id: str = Field(alias="estudianteId")
    error: str


class PromotionResult(_CamelModel):
    """Outcome of promoting a level."""

    promoted: int = Field(alias="promovidos", ge=0)
    already_enrolled: int = Field(alias="yaInscritos", ge=0)
    total_approved: int = Field(alias="totalAprobados", ge=0)
    errors: list[PromotionFailure] = Field(alias="errores", default_factory=list)
