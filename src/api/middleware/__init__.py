# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

Exports:
    TenantMiddleware: Resolves the institution from header, subdomain
        or custom domain.
    InstitutionContext: The resolved institution.
"""

from src.api.middleware.tenant import InstitutionContext, TenantMiddleware

__all__ = [
    "TenantMiddleware",
    "InstitutionContext",
]
