"""Tests for the REST API layer.

Uses httpx.AsyncClient over ASGITransport. The analyzer and the GitHub
client are replaced through ``dependency_overrides``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from httpx import ASGITransport, AsyncClient

from reposentinel.core.config import Settings
from reposentinel.engines.analysis.models import AnalysisResult
from reposentinel.engines.repo_fetcher.models import SkippedItem
from reposentinel.engines.vuln_scanner.models import Finding, SeverityCounts
from reposentinel.exceptions import (
    AccessDeniedError,
    FetchFailedError,
    InvalidUrlError,
    PrivateOrMissingRepoError,
    RateLimitedError,
    RepoNotFoundError,
)

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
URL = "https://github.com/acme/shop"


def _finding() -> Finding:
    return Finding(
        id="src/db.js-sql-0",
        severity="critical",
        category="SQL Injection",
        title="Potential SQL Injection Vulnerability",
        description="String interpolation in SQL query detected in src/db.js.",
        file_path="src/db.js",
        recommendation="Use parameterized queries.",
        line_number=4,
        code_snippet="query(`SELECT ${id}`)",
    )


def _result() -> AnalysisResult:
    return AnalysisResult(
        repo_owner="acme",
        repo_name="shop",
        repo_url=URL,
        security_score=75,
        counts=SeverityCounts(critical=1),
        findings=[_finding()],
        analyzed_at=NOW,
        branch="main",
        language="JavaScript",
        files_scanned=4,
        skipped=[SkippedItem("dist/app.js", "too_large", "250000 bytes")],
    )


@pytest.fixture
def app():
    from fastapi import FastAPI

    from reposentinel.api import deps
    from reposentinel.api.errors import register_error_handlers
    from reposentinel.api.routers import analyses

    application = FastAPI()
    register_error_handlers(application)
    application.include_router(analyses.router, prefix="/api/v1/analyses")
    application.dependency_overrides[deps.get_settings] = lambda: Settings()
    return application


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _use_analyzer(app, analyzer):
    from reposentinel.api import deps

    app.dependency_overrides[deps.get_analyzer] = lambda: analyzer


# ── TestAnalysesRouter ────────────────────────────────────────────────────


class TestAnalysesRouter:
    @pytest.mark.anyio
    async def test_create_analysis(self, app, client):
        analyzer = MagicMock()
        analyzer.analyze_repository = AsyncMock(return_value=_result())
        _use_analyzer(app, analyzer)

        resp = await client.post("/api/v1/analyses", json={"repo_url": f"  {URL} "})

        assert resp.status_code == 200
        data = resp.json()
        assert data["repo_owner"] == "acme"
        assert data["security_score"] == 75
        assert data["total_issues"] == 1
        assert data["counts"] == {"critical": 1, "high": 0, "medium": 0, "low": 0}
        assert data["findings"][0]["id"] == "src/db.js-sql-0"
        assert data["findings"][0]["line_number"] == 4
        assert data["skipped"] == [
            {"path": "dist/app.js", "reason": "too_large", "detail": "250000 bytes"}
        ]
        analyzer.analyze_repository.assert_awaited_once_with(URL)

    @pytest.mark.anyio
    async def test_missing_body_field(self, client):
        resp = await client.post("/api/v1/analyses", json={})
        assert resp.status_code == 422

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "exc, status, code, private",
        [
            (InvalidUrlError("nope"), 422, "invalid_url", False),
            (PrivateOrMissingRepoError("Repository not found."), 404, "private_or_missing_repo", True),
            (RepoNotFoundError("Repository not found."), 404, "repo_not_found", False),
            (AccessDeniedError("Access denied.", private_repository=True), 403, "access_denied", True),
            (RateLimitedError(authenticated=False), 429, "rate_limited", False),
            (FetchFailedError(None, "Network error."), 502, "fetch_failed", False),
        ],
    )
    async def test_error_mapping(self, app, client, exc, status, code, private):
        analyzer = MagicMock()
        analyzer.analyze_repository = AsyncMock(side_effect=exc)
        _use_analyzer(app, analyzer)

        resp = await client.post("/api/v1/analyses", json={"repo_url": URL})

        assert resp.status_code == status
        body = resp.json()
        assert body["code"] == code
        assert body["private_repository"] is private
        assert body["detail"] == str(exc)


# ── TestFixRequestRouter ──────────────────────────────────────────────────


class TestFixRequestRouter:
    def _body(self, **extra):
        finding = _finding()
        return {
            "repo_url": URL,
            "finding": {
                "id": finding.id,
                "severity": finding.severity,
                "category": finding.category,
                "title": finding.title,
                "description": finding.description,
                "file_path": finding.file_path,
                "line_number": finding.line_number,
                "code_snippet": finding.code_snippet,
                "recommendation": finding.recommendation,
            },
            **extra,
        }

    def _use_github(self, app, github):
        from reposentinel.api import deps

        async def _client():
            async with github.client() as c:
                yield c

        app.dependency_overrides[deps.get_github_client] = _client

    @pytest.mark.anyio
    async def test_fix_request(self, app, client, github):
        github.file("src/db.js", "const q = 1;\n", ref="main")
        self._use_github(app, github)

        resp = await client.post(
            "/api/v1/analyses/fix-request",
            json=self._body(language="JavaScript", framework="Express"),
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["fileContent"] == "const q = 1;\n"
        assert data["issue"]["filePath"] == "src/db.js"
        assert data["issue"]["lineNumber"] == 4
        assert data["repoContext"] == {
            "name": "shop",
            "language": "JavaScript",
            "framework": "Express",
        }

    @pytest.mark.anyio
    async def test_fix_request_master_fallback(self, app, client, github):
        github.file("src/db.js", "legacy\n", ref="master")
        self._use_github(app, github)

        resp = await client.post("/api/v1/analyses/fix-request", json=self._body())

        assert resp.status_code == 200
        assert resp.json()["fileContent"] == "legacy\n"

    @pytest.mark.anyio
    async def test_fix_request_file_missing(self, app, client, github):
        self._use_github(app, github)
        resp = await client.post("/api/v1/analyses/fix-request", json=self._body())
        assert resp.status_code == 502
        assert resp.json()["code"] == "fetch_failed"

    @pytest.mark.anyio
    async def test_fix_request_invalid_url(self, app, client, github):
        self._use_github(app, github)
        body = self._body()
        body["repo_url"] = "not-a-repo"
        resp = await client.post("/api/v1/analyses/fix-request", json=body)
        assert resp.status_code == 422
        assert resp.json()["code"] == "invalid_url"


# ── TestDeps ──────────────────────────────────────────────────────────────


class TestDeps:
    def test_bearer_token_wins(self):
        from reposentinel.api.deps import get_github_token

        creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials="ghp_user")
        assert get_github_token(creds, Settings(github_token="ghp_env")) == "ghp_user"

    def test_falls_back_to_configured_token(self):
        from reposentinel.api.deps import get_github_token

        assert get_github_token(None, Settings(github_token="ghp_env")) == "ghp_env"
        assert get_github_token(None, Settings()) is None

    def test_analyzer_carries_token(self):
        from reposentinel.api.deps import get_analyzer

        analyzer = get_analyzer(Settings(), "ghp_user")
        assert analyzer.authenticated is True


# ── TestApp ───────────────────────────────────────────────────────────────


class TestApp:
    @pytest.mark.anyio
    async def test_health(self):
        from reposentinel.api import create_app

        transport = ASGITransport(app=create_app())
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            resp = await c.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_routes_registered(self):
        from reposentinel.api import create_app

        paths = {route.path for route in create_app().routes}
        assert "/api/v1/analyses" in paths
        assert "/api/v1/analyses/fix-request" in paths
