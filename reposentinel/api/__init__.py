"""RepoSentinel REST API — FastAPI application factory."""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reposentinel.api.errors import register_error_handlers
from reposentinel.api.routers import analyses
from reposentinel.core.logging import setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    setup_logging()

    app = FastAPI(
        title="RepoSentinel",
        docs_url="/api/v1/docs",
        openapi_url="/api/v1/openapi.json",
    )

    register_error_handlers(app)

    cors_origins = os.environ.get("REPOSENTINEL_CORS_ORIGINS", "http://localhost:5173")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in cors_origins.split(",")],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["ops"])
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(analyses.router, prefix="/api/v1/analyses", tags=["analyses"])

    return app
