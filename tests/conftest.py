# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from collections.abc import Generator
from uuid import uuid4

import pytest

from src.core.config import clear_settings_cache


# =============================================================================
# Settings Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop cached settings around every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def institution_id() -> str:
    """Provide the caller's institution ID."""
    return "550e8400-e29b-41d4-a716-446655440000"


@pytest.fixture
def other_institution_id() -> str:
    """Provide an institution ID the caller does not belong to."""
    return "550e8400-e29b-41d4-a716-4466554400ff"


@pytest.fixture
def student_id() -> str:
    """Provide a sample student ID."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def level_id() -> str:
    """Provide a sample level ID."""
    return "550e8400-e29b-41d4-a716-446655440002"


@pytest.fixture
def new_id():
    """Provide a factory of fresh string IDs."""
    return lambda: str(uuid4())
