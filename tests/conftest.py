"""Shared pytest fixtures for RepoSentinel tests."""

import pytest


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"
