# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    enrollments: Level enrollment, withdrawal and promotion endpoints.
"""

from fastapi import APIRouter

from src.api.v1 import enrollments

# Mounted under settings.api.prefix by create_app
router = APIRouter()

router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
