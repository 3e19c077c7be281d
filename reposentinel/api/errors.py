"""Unified error handling — AnalysisError → JSON."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from reposentinel.exceptions import (
    AccessDeniedError,
    AnalysisError,
    FetchFailedError,
    InvalidUrlError,
    ManifestParseError,
    PrivateOrMissingRepoError,
    RateLimitedError,
    RepoNotFoundError,
)

_STATUS_MAP: dict[type[AnalysisError], int] = {
    InvalidUrlError: 422,
    PrivateOrMissingRepoError: 404,
    RepoNotFoundError: 404,
    AccessDeniedError: 403,
    RateLimitedError: 429,
    FetchFailedError: 502,
    ManifestParseError: 422,
}


def status_for(exc: AnalysisError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_MAP:
            return _STATUS_MAP[cls]
    return 500


async def _analysis_error_handler(_request: Request, exc: AnalysisError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content={
            "detail": str(exc),
            "code": exc.code,
            "private_repository": exc.private_repository,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on the app."""
    app.add_exception_handler(AnalysisError, _analysis_error_handler)  # type: ignore[arg-type]
