"""Dependency injection for settings, the per-request credential and the analyzer."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from reposentinel.core.config import Settings
from reposentinel.engines.analysis.runner import RepositoryAnalyzer
from reposentinel.engines.repo_fetcher.github_client import GitHubClient

_bearer = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def get_github_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> str | None:
    """The caller's bearer token, else the configured ``GITHUB_TOKEN``."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return settings.github_token


def get_analyzer(
    settings: Settings = Depends(get_settings),
    token: str | None = Depends(get_github_token),
) -> RepositoryAnalyzer:
    return RepositoryAnalyzer(settings=settings, token=token)


async def get_github_client(
    settings: Settings = Depends(get_settings),
    token: str | None = Depends(get_github_token),
) -> AsyncGenerator[GitHubClient, None]:
    async with GitHubClient(token, base_url=settings.api_url, timeout=settings.http_timeout) as client:
        yield client
