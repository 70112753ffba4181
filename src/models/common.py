# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enums used by ORM models, services and API schemas.

Values are stored as plain strings in the database; the enums subclass
``str`` so stored values compare equal to enum members.
"""

from enum import Enum


class GradingFormat(str, Enum):
    """Grade-sheet format (formato sabana) of an institution or level.

    The suffix identifies the national curriculum (DO: Dominican Republic,
    HT: Haiti).
    """

    INICIAL_DO = "INICIAL_DO"
    INICIAL_HT = "INICIAL_HT"
    PRIMARIA_DO = "PRIMARIA_DO"
    PRIMARIA_HT = "PRIMARIA_HT"
    SECUNDARIA_DO = "SECUNDARIA_DO"
    SECUNDARIA_HT = "SECUNDARIA_HT"
    POLITECNICO_DO = "POLITECNICO_DO"
    ADULTOS = "ADULTOS"


class SubjectType(str, Enum):
    """Subject classification."""

    GENERAL = "GENERAL"
    TECNICA = "TECNICA"


class UserType(str, Enum):
    """Platform user roles."""

    ADMIN = "admin"
    DIRECTOR = "director"
    COORDINATOR = "coordinator"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


class GradeStatus(str, Enum):
    """Academic standing of a grade record (situacion).

    A freshly bootstrapped record has no status; grading features set it.
    """

    PENDIENTE = "PENDIENTE"
    APROBADO = "APROBADO"
    APLAZADO = "APLAZADO"
    REPROBADO = "REPROBADO"
