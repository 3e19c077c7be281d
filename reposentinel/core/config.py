"""Runtime settings, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_API_URL = "https://api.github.com"


def _env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


def _env_float_or_none(key: str) -> float | None:
    raw = os.environ.get(key)
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


@dataclass(frozen=True)
class Settings:
    """Knobs for one analysis run.

    Defaults match the hosted service: 25 files per run, files of
    100,000 bytes or more are skipped, ``main`` then ``master``.
    """

    api_url: str = DEFAULT_API_URL
    primary_branch: str = "main"
    fallback_branch: str = "master"
    max_files: int = 25
    max_file_size: int = 100_000
    http_timeout: float | None = None
    github_token: str | None = None

    @property
    def branches(self) -> tuple[str, str]:
        return (self.primary_branch, self.fallback_branch)

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``REPOSENTINEL_*`` and ``GITHUB_TOKEN`` variables.

        Raises ``ValueError`` on malformed numeric values.
        """
        max_files = _env_int("REPOSENTINEL_MAX_FILES", 25)
        max_file_size = _env_int("REPOSENTINEL_MAX_FILE_SIZE", 100_000)
        if max_files < 1 or max_file_size < 1:
            raise ValueError("REPOSENTINEL_MAX_FILES and REPOSENTINEL_MAX_FILE_SIZE must be positive")

        token = os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN") or None
        return cls(
            api_url=os.environ.get("REPOSENTINEL_GITHUB_API_URL", DEFAULT_API_URL).rstrip("/"),
            max_files=max_files,
            max_file_size=max_file_size,
            http_timeout=_env_float_or_none("REPOSENTINEL_HTTP_TIMEOUT"),
            github_token=token,
        )
