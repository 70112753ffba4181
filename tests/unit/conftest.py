# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for service unit tests.

Services run against an AsyncMock session. Each ``db.execute`` call is
answered, in order, by the results queued in ``mock_db.execute.side_effect``.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.execute = AsyncMock()
    return db


@pytest.fixture
def scalar_result():
    """Build a result whose scalar_one_or_none() returns the value."""

    def _make(value):
        result = MagicMock()
        result.scalar_one_or_none.return_value = value
        return result

    return _make


@pytest.fixture
def scalars_result():
    """Build a result whose scalars().all() returns the values."""

    def _make(values):
        result = MagicMock()
        result.scalars.return_value.all.return_value = list(values)
        return result

    return _make


@pytest.fixture
def rows_result():
    """Build a result whose all() returns the rows."""

    def _make(rows):
        result = MagicMock()
        result.all.return_value = list(rows)
        return result

    return _make


@pytest.fixture
def sample_level(level_id, institution_id):
    """Create a sample level under the secondary format."""
    level = MagicMock()
    level.id = level_id
    level.institution_id = institution_id
    level.name = "1ro de Secundaria"
    level.effective_grading_format = "SECUNDARIA_DO"
    return level


@pytest.fixture
def sample_student(student_id, institution_id):
    """Create a sample student."""
    student = MagicMock()
    student.id = student_id
    student.institution_id = institution_id
    student.user_type = "student"
    student.deleted_at = None
    student.current_level_id = None
    return student


@pytest.fixture
def active_cycle(institution_id):
    """Create the active academic cycle."""
    cycle = MagicMock()
    cycle.id = str(uuid4())
    cycle.institution_id = institution_id
    cycle.is_active = True
    cycle.is_closed = False
    return cycle


@pytest.fixture
def make_class(level_id, active_cycle):
    """Build a class of the level with a subject of the given type."""

    def _make(subject_type: str = "GENERAL"):
        class_ = MagicMock()
        class_.id = str(uuid4())
        class_.level_id = level_id
        class_.academic_cycle_id = active_cycle.id
        class_.subject.subject_type = subject_type
        return class_

    return _make
