# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions for level enrollment, withdrawal and promotion.

This module defines the exception hierarchy for enrollment operations:
- EnrollmentError: Base exception carrying the HTTP status it maps to
- EnrollmentNotFoundError: Referenced entity absent or owned by another
  institution (404)
- EnrollmentValidationError: Entities exist but preconditions fail (400)
- EnrollmentConflictError: Operation would duplicate an enrollment or
  its grade ledger (409)

Cross-tenant references raise the same NotFound errors as missing rows,
so callers never learn that an id exists in another institution.
"""


class EnrollmentError(Exception):
    """Base exception for all enrollment errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
        status_code: HTTP status the API layer responds with.
    """

    status_code: int = 500

    def __init__(self, message: str, details: dict | None = None):
        """Initialize enrollment error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class EnrollmentNotFoundError(EnrollmentError):
    """Referenced entity does not exist in the caller's institution."""

    status_code = 404


class EnrollmentValidationError(EnrollmentError):
    """Preconditions for the operation are not satisfied."""

    status_code = 400


class EnrollmentConflictError(EnrollmentError):
    """Operation would duplicate an enrollment or its grade ledger."""

    status_code = 409


# ============================================================================
# Not found
# ============================================================================


class LevelNotFoundError(EnrollmentNotFoundError):
    """Raised when a level is not found in the institution."""

    def __init__(self, level_id: str, message: str = "Level not found"):
        super().__init__(message, {"level_id": level_id})


class StudentNotFoundError(EnrollmentNotFoundError):
    """Raised when a student is not found in the institution.

    Also covers users that exist but are not students or were deleted.
    """

    def __init__(self, student_id: str):
        super().__init__("Student not found", {"student_id": student_id})


class AcademicCycleNotFoundError(EnrollmentNotFoundError):
    """Raised when an explicitly requested cycle is not found."""

    def __init__(self, cycle_id: str):
        super().__init__("Academic cycle not found", {"cycle_id": cycle_id})


# ============================================================================
# Validation
# ============================================================================


class NoActiveCycleError(EnrollmentValidationError):
    """Raised when the institution has no active academic cycle."""

    def __init__(self, institution_id: str):
        super().__init__("No active academic cycle", {"institution_id": institution_id})


class NoClassesForLevelError(EnrollmentValidationError):
    """Raised when the level has no classes in the target cycle."""

    def __init__(self, level_id: str, cycle_id: str):
        super().__init__(
            "No classes assigned to this level for the active cycle",
            {"level_id": level_id, "cycle_id": cycle_id},
        )


class AcademicCycleClosedError(EnrollmentValidationError):
    """Raised when enrolling into a closed academic cycle."""

    def __init__(self, cycle_id: str):
        super().__init__("Academic cycle is closed", {"cycle_id": cycle_id})


class NoActiveEnrollmentsError(EnrollmentValidationError):
    """Raised when withdrawing a student with nothing to withdraw."""

    def __init__(self, student_id: str, level_id: str):
        super().__init__(
            "Student has no active enrollments in this level",
            {"student_id": student_id, "level_id": level_id},
        )


class NoInactiveEnrollmentsError(EnrollmentValidationError):
    """Raised when reactivating a student with nothing to reactivate."""

    def __init__(self, student_id: str, level_id: str):
        super().__init__(
            "Student has no inactive enrollments in this level",
            {"student_id": student_id, "level_id": level_id},
        )


class NoSourceClassesError(EnrollmentValidationError):
    """Raised when the source level of a promotion has no classes."""

    def __init__(self, level_id: str):
        super().__init__("No classes found in the source level", {"level_id": level_id})


class SameCycleError(EnrollmentValidationError):
    """Raised when a promotion's source and target cycle coincide."""

    def __init__(self, cycle_id: str):
        super().__init__(
            "Source and target cycle cannot be the same",
            {"cycle_id": cycle_id},
        )


# ============================================================================
# Conflict
# ============================================================================


class AlreadyEnrolledError(EnrollmentConflictError):
    """Raised when the student already has an active enrollment.

    Raised both by the application-level duplicate check and when the
    storage layer rejects a write through the active-enrollment index.
    """

    def __init__(self, student_id: str, class_ids: list[str] | None = None):
        details: dict = {"student_id": student_id}
        if class_ids:
            details["class_ids"] = class_ids
        super().__init__("Student already enrolled", details)


class WithdrawnEnrollmentError(EnrollmentConflictError):
    """Raised when the student was withdrawn from target classes.

    The withdrawn enrollments still own the grade ledger of their class
    and cycle; they are restored with reactivation instead of a second
    bootstrap.
    """

    def __init__(self, student_id: str, class_ids: list[str]):
        super().__init__(
            "Student was withdrawn from this level; reactivate the enrollment instead",
            {"student_id": student_id, "class_ids": class_ids},
        )


class GradeLedgerExistsError(EnrollmentConflictError):
    """Raised when storage already holds the grade ledger being created.

    The grade-ledger unique indexes allow one grade record per student,
    class and cycle, whatever the state of the enrollment rows.
    """

    def __init__(self, student_id: str):
        super().__init__(
            "Student already has a grade ledger for this level and cycle",
            {"student_id": student_id},
        )
