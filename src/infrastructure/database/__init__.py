# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for PostgreSQL connections.

This package provides SQLAlchemy async database access for the shared
platform database. Tenant isolation is row-level (``institution_id``).

Example:
    from src.infrastructure.database import get_session

    async with get_session() as session:
        result = await session.execute(select(Institution))
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    PlatformDatabase,
    check_database_connection,
    close_database,
    get_database,
    get_session,
    init_database,
)

__all__ = [
    "DatabaseError",
    "PlatformDatabase",
    "check_database_connection",
    "close_database",
    "get_database",
    "get_session",
    "init_database",
]
