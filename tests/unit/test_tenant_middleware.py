# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for tenant resolution middleware."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.api.middleware.tenant import InstitutionContext, TenantMiddleware


def _institution(**overrides):
    institution = MagicMock()
    institution.id = overrides.get("id", "inst-1")
    institution.slug = overrides.get("slug", "liceo-central")
    institution.name = overrides.get("name", "Liceo Central")
    return institution


@pytest.fixture
def lookup_session():
    """Session answering every institution lookup with one result."""
    session = AsyncMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = _institution()
    session.execute = AsyncMock(return_value=result)
    return session


@pytest.fixture
def session_factory(lookup_session):
    @asynccontextmanager
    async def _factory():
        yield lookup_session

    return _factory


@pytest.fixture
def middleware(session_factory):
    return TenantMiddleware(MagicMock(), session_factory=session_factory)


def _request(headers: dict[str, str]):
    request = MagicMock()
    request.headers = headers
    return request


def _compiled_sql(session) -> str:
    stmt = session.execute.call_args.args[0]
    return str(stmt.compile(compile_kwargs={"literal_binds": True}))


class TestExtractSubdomain:
    """Tests for subdomain extraction."""

    @pytest.mark.parametrize(
        ("host", "expected"),
        [
            ("liceo-central.escolaris.app", "liceo-central"),
            ("escolaris.app", None),
            ("www.escolaris.app", None),
            ("a.b.escolaris.app", None),
            ("portal.liceocentral.edu.do", None),
            ("notescolaris.app", None),
        ],
    )
    def test_extract_subdomain(self, middleware, host, expected) -> None:
        assert middleware._extract_subdomain(host) == expected


class TestResolve:
    """Tests for institution resolution order."""

    @pytest.mark.asyncio
    async def test_header_slug_wins(self, middleware, lookup_session) -> None:
        request = _request({
            "X-Institution-Slug": " Liceo-Central ",
            "host": "otro.escolaris.app",
        })

        institution = await middleware._resolve(request)

        assert isinstance(institution, InstitutionContext)
        assert institution.id == "inst-1"
        assert institution.name == "Liceo Central"
        sql = _compiled_sql(lookup_session)
        assert "institutions.slug = 'liceo-central'" in sql
        assert "institutions.is_active" in sql

    @pytest.mark.asyncio
    async def test_subdomain(self, middleware, lookup_session) -> None:
        institution = await middleware._resolve(_request({"host": "liceo-central.escolaris.app:443"}))

        assert institution.slug == "liceo-central"
        assert "institutions.slug = 'liceo-central'" in _compiled_sql(lookup_session)

    @pytest.mark.asyncio
    async def test_custom_domain_must_be_verified(self, middleware, lookup_session) -> None:
        await middleware._resolve(_request({"host": "portal.liceocentral.edu.do"}))

        sql = _compiled_sql(lookup_session)
        assert "institutions.custom_domain = 'portal.liceocentral.edu.do'" in sql
        assert "institutions.custom_domain_verified" in sql

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "host",
        ["localhost:8000", "127.0.0.1", "escolaris.app", "www.escolaris.app", ""],
    )
    async def test_hosts_without_tenant(self, middleware, lookup_session, host) -> None:
        assert await middleware._resolve(_request({"host": host})) is None
        lookup_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_institution(self, middleware, lookup_session) -> None:
        lookup_session.execute.return_value.scalar_one_or_none.return_value = None

        assert await middleware._resolve(_request({"X-Institution-Slug": "nope"})) is None


class TestDispatch:
    """Tests for the middleware inside an application."""

    def _client(self, session_factory) -> TestClient:
        app = FastAPI()
        app.add_middleware(TenantMiddleware, session_factory=session_factory)

        @app.get("/whoami")
        async def whoami(request: Request):
            institution = request.state.institution
            return {"institution": institution.id if institution else None}

        @app.get("/health")
        async def health(request: Request):
            return {"institution": request.state.institution}

        return TestClient(app)

    def test_sets_request_state(self, session_factory) -> None:
        client = self._client(session_factory)

        response = client.get("/whoami", headers={"X-Institution-Slug": "liceo-central"})

        assert response.json() == {"institution": "inst-1"}

    def test_public_paths_skip_resolution(self, session_factory, lookup_session) -> None:
        client = self._client(session_factory)

        response = client.get("/health", headers={"X-Institution-Slug": "liceo-central"})

        assert response.json() == {"institution": None}
        lookup_session.execute.assert_not_awaited()

    def test_database_errors_leave_institution_unresolved(
        self, session_factory, lookup_session
    ) -> None:
        lookup_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        client = self._client(session_factory)

        response = client.get("/whoami", headers={"X-Institution-Slug": "liceo-central"})

        assert response.status_code == 200
        assert response.json() == {"institution": None}
