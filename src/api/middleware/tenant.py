# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tenant resolution middleware.

This middleware resolves the institution from:
1. X-Institution-Slug header
2. Subdomain of the platform domain (e.g., liceo-central.escolaris.app)
3. A verified custom domain (e.g., portal.liceocentral.edu.do)

The resolved institution is stored in request.state for use by
dependencies. Services never read it from there: routes pass the
institution id explicitly into every service call.

Example:
    # Request with header
    POST /api/v1/enrollments/levels/{level_id}
    X-Institution-Slug: liceo-central

    # Request with subdomain
    POST https://liceo-central.escolaris.app/api/v1/enrollments/levels/{level_id}
"""

import logging
from contextlib import AbstractAsyncContextManager
from typing import Callable

from fastapi import Request, Response
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.infrastructure.database.connection import DatabaseError
from src.infrastructure.database.models import Institution
from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)

# Default header name for the institution slug
INSTITUTION_HEADER = "X-Institution-Slug"

# Paths that don't require tenant context
PUBLIC_PATHS = frozenset({
    "/",
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
})

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class InstitutionContext:
    """Institution resolved from the request.

    Attributes:
        id: Institution identifier.
        slug: Institution slug.
        name: Institution display name.
    """

    def __init__(
        self,
        institution_id: str,
        slug: str,
        name: str,
    ) -> None:
        self.id = institution_id
        self.slug = slug
        self.name = name


class TenantMiddleware(BaseHTTPMiddleware):
    """Middleware for resolving the institution of a request.

    The resolved institution is stored in request.state.institution.
    Unknown or inactive institutions leave it as None; the
    require_institution dependency then rejects the request.

    Attributes:
        _session_factory: Callable returning a database session context.
        _base_domain: Platform domain for subdomain extraction.
        _header: Header carrying an explicit institution slug.

    Example:
        >>> app.add_middleware(
        ...     TenantMiddleware,
        ...     session_factory=get_session,
        ...     base_domain="escolaris.app",
        ... )
    """

    def __init__(
        self,
        app: ASGIApp,
        session_factory: SessionFactory,
        base_domain: str = "escolaris.app",
        header: str = INSTITUTION_HEADER,
    ) -> None:
        """Initialize the tenant middleware.

        Args:
            app: ASGI application.
            session_factory: Callable returning a database session context.
            base_domain: Platform domain for subdomain extraction.
            header: Header carrying an explicit institution slug.
        """
        super().__init__(app)
        self._session_factory = session_factory
        self._base_domain = base_domain.lower()
        self._header = header

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        """Process the request and resolve the institution.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler.

        Returns:
            HTTP response.
        """
        request.state.institution = None

        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        try:
            institution = await self._resolve(request)
            if institution:
                request.state.institution = institution
                logger.debug("Institution resolved: %s", institution.slug)
        except (SQLAlchemyError, DatabaseError) as e:
            logger.warning("Institution resolution error: %s", str(e))

        if request.state.institution is None:
            return await call_next(request)

        bind_context(institution_id=request.state.institution.id)
        try:
            return await call_next(request)
        finally:
            clear_context()

    async def _resolve(self, request: Request) -> InstitutionContext | None:
        """Resolve the institution by slug, subdomain or custom domain."""
        slug = request.headers.get(self._header)
        if slug:
            return await self._lookup(Institution.slug == slug.strip().lower())

        host = request.headers.get("host", "").split(":")[0].lower()
        if not host or host in ("localhost", "127.0.0.1"):
            return None

        subdomain = self._extract_subdomain(host)
        if subdomain:
            return await self._lookup(Institution.slug == subdomain)

        if host == self._base_domain or host.endswith("." + self._base_domain):
            return None

        return await self._lookup(
            Institution.custom_domain == host,
            Institution.custom_domain_verified.is_(True),
        )

    def _extract_subdomain(self, host: str) -> str | None:
        """Extract the subdomain of the platform domain.

        Examples:
            liceo-central.escolaris.app -> liceo-central
            escolaris.app -> None
            www.escolaris.app -> None
            portal.liceocentral.edu.do -> None

        Args:
            host: Host header value without port.

        Returns:
            Subdomain or None.
        """
        suffix = "." + self._base_domain
        if not host.endswith(suffix):
            return None

        subdomain = host[: -len(suffix)]
        if subdomain and subdomain != "www" and "." not in subdomain:
            return subdomain

        return None

    async def _lookup(self, *criteria) -> InstitutionContext | None:
        """Look up an active institution matching the criteria."""
        async with self._session_factory() as db:
            stmt = select(Institution).where(*criteria, Institution.is_active.is_(True))
            result = await db.execute(stmt)
            institution = result.scalar_one_or_none()

            if not institution:
                return None

            return InstitutionContext(
                institution_id=institution.id,
                slug=institution.slug,
                name=institution.name,
            )


def get_institution_from_request(request: Request) -> InstitutionContext | None:
    """Get the resolved institution from request state.

    Args:
        request: HTTP request with state.

    Returns:
        InstitutionContext or None.
    """
    return getattr(request.state, "institution", None)
