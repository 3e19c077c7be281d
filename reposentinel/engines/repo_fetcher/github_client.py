"""Async GitHub REST client used by the fetcher engine.

The client never retries: the only retry in a run is the tree fetch's
single branch fallback, which lives in :mod:`tree`.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from reposentinel.core.config import DEFAULT_API_URL

log = structlog.get_logger("reposentinel.engine")

GITHUB_ACCEPT = "application/vnd.github.v3+json"


class GitHubClient:
    """Thin async wrapper around the GitHub REST API.

    The credential is fixed for the client's lifetime and attached to every
    request. Build one client per run.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token or None
        headers: dict[str, str] = {
            "Accept": GITHUB_ACCEPT,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        kwargs: dict[str, Any] = {"base_url": base_url, "headers": headers}
        if timeout is not None:
            kwargs["timeout"] = timeout
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**kwargs)

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """Single GET; the response is returned whatever its status.

        Transport failures propagate as :class:`httpx.RequestError`.
        """
        response = await self._client.get(path, params=params)
        if response.status_code >= 400:
            log.debug("github.non_success", path=path, status=response.status_code)
        return response

    # ── helpers ────────────────────────────────────────────────────────────

    @staticmethod
    def error_message(response: httpx.Response) -> str:
        """Return the ``message`` field of an error body, or ``""``."""
        try:
            data = response.json()
        except ValueError:
            return ""
        if isinstance(data, dict):
            return str(data.get("message") or "")
        return ""

    @staticmethod
    def is_rate_limited(response: httpx.Response) -> bool:
        """Check if a 403 response is due to rate limiting."""
        if "rate limit" in GitHubClient.error_message(response).lower():
            return True
        remaining = GitHubClient._parse_header_int(response.headers.get("X-RateLimit-Remaining"))
        if remaining is not None:
            return remaining == 0
        # GitHub also uses Retry-After for secondary rate limits
        return "Retry-After" in response.headers

    @staticmethod
    def _parse_header_int(value: str | None) -> int | None:
        """Safely parse an integer header value."""
        if value is None:
            return None
        try:
            return int(value)
        except (ValueError, TypeError):
            return None
