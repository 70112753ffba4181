# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for database integration tests.

Provides an engine, sessions and a seeded institution on a real
PostgreSQL database. Tests are skipped when TEST_DATABASE_URL is unset.
"""

import os
from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.infrastructure.database.models import (
    AcademicCycle,
    Base,
    Class,
    Institution,
    Level,
    Subject,
    User,
)
from src.models.common import GradingFormat, SubjectType, UserType

pytestmark = pytest.mark.integration


@pytest.fixture(scope="session")
def database_url() -> str:
    """Get database URL for tests."""
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL not set")
    return url


@pytest_asyncio.fixture(scope="function")
async def db_engine(database_url: str):
    """Create async engine with a fresh schema."""
    engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for database tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def school(session_factory) -> dict[str, str]:
    """Seed a polytechnic institution with one level, cycle and two classes.

    Returns:
        Ids of the seeded rows.
    """
    async with session_factory() as session:
        institution = Institution(
            name="Politécnico Central",
            slug="politecnico-central",
            grading_format=GradingFormat.POLITECNICO_DO.value,
        )
        session.add(institution)
        await session.flush()

        level = Level(institution_id=institution.id, name="5to Informática")
        cycle = AcademicCycle(
            institution_id=institution.id,
            name="2025-2026",
            start_date=date(2025, 8, 18),
            end_date=date(2026, 6, 19),
            is_active=True,
        )
        general = Subject(
            institution_id=institution.id,
            name="Lengua Española",
            subject_type=SubjectType.GENERAL.value,
        )
        technical = Subject(
            institution_id=institution.id,
            name="Programación Web",
            subject_type=SubjectType.TECNICA.value,
        )
        student = User(
            institution_id=institution.id,
            email="ana@politecnico.do",
            first_name="Ana",
            last_name="Pérez",
            user_type=UserType.STUDENT.value,
        )
        session.add_all([level, cycle, general, technical, student])
        await session.flush()

        classes = [
            Class(
                institution_id=institution.id,
                level_id=level.id,
                academic_cycle_id=cycle.id,
                subject_id=subject.id,
                name=subject.name,
            )
            for subject in (general, technical)
        ]
        session.add_all(classes)
        await session.commit()

        return {
            "institution_id": institution.id,
            "level_id": level.id,
            "cycle_id": cycle.id,
            "student_id": student.id,
        }
