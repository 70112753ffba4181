# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get the resolved institution

Example:
    @router.post("/levels/{level_id}")
    async def enroll(level_id: UUID, db: DB, institution: CurrentInstitution):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.middleware.tenant import InstitutionContext, get_institution_from_request
from src.core.config import get_settings
from src.infrastructure.database.connection import get_session

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session.

    Yields:
        AsyncSession; storage errors surface as DatabaseError.
    """
    async with get_session() as session:
        yield session


def require_institution(request: Request) -> InstitutionContext:
    """Require a resolved institution.

    Args:
        request: HTTP request.

    Returns:
        InstitutionContext.

    Raises:
        HTTPException: If no institution was resolved.
    """
    institution = get_institution_from_request(request)
    if not institution:
        header = get_settings().tenant.header
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Institution context required. Provide {header} header.",
        )

    return institution


# =========================================================================
# Type aliases for cleaner endpoint signatures
# =========================================================================

DB = Annotated[AsyncSession, Depends(get_db)]
CurrentInstitution = Annotated[InstitutionContext, Depends(require_institution)]
