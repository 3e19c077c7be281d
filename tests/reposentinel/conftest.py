"""Shared fixtures for reposentinel tests.

No network access: GitHub is replaced by an in-memory router mounted on
``httpx.MockTransport``.
"""

from __future__ import annotations

import base64
from collections.abc import Callable

import httpx
import pytest

from reposentinel.engines.repo_fetcher.github_client import GitHubClient

NETWORK_ERROR = "network-error"


def encode(text: str) -> str:
    """Base64 the way the contents API does, with a line break every 60 chars."""
    raw = base64.b64encode(text.encode()).decode()
    return "\n".join(raw[i : i + 60] for i in range(0, len(raw), 60))


class FakeGitHub:
    """Route table keyed by ``path`` or ``path?ref=<branch>``.

    A route value is an ``httpx.Response``, a callable taking the request,
    or :data:`NETWORK_ERROR`. Unknown routes answer 404.
    """

    def __init__(self, owner: str = "acme", name: str = "shop") -> None:
        self.base = f"/repos/{owner}/{name}"
        self.routes: dict[str, httpx.Response | Callable | str] = {}
        self.requests: list[httpx.Request] = []

    # ── route helpers ──────────────────────────────────────────────────────

    def repo(self, status: int = 200, json: dict | None = None, headers: dict | None = None):
        body = json if json is not None else {"full_name": self.base[7:], "language": "JavaScript"}
        self.routes[self.base] = httpx.Response(status, json=body, headers=headers)

    def tree(
        self,
        branch: str,
        entries: list[dict] | None = None,
        *,
        status: int = 200,
        json: dict | None = None,
        headers: dict | None = None,
    ):
        key = f"{self.base}/git/trees/{branch}"
        if status == 200 and json is None:
            json = {"tree": entries or [], "truncated": False}
        self.routes[key] = httpx.Response(status, json=json or {"message": "Not Found"}, headers=headers)

    def tree_error(self, branch: str):
        self.routes[f"{self.base}/git/trees/{branch}"] = NETWORK_ERROR

    def file(self, path: str, text: str, *, size: int | None = None, ref: str | None = None):
        key = f"{self.base}/contents/{path}" + (f"?ref={ref}" if ref else "")
        body = {
            "path": path,
            "size": len(text.encode()) if size is None else size,
            "encoding": "base64",
            "content": encode(text),
        }
        self.routes[key] = httpx.Response(200, json=body)

    def raw(self, key: str, value: httpx.Response | Callable | str):
        self.routes[self.base + key] = value

    def fail(self, key: str):
        self.routes[self.base + key] = NETWORK_ERROR

    encode = staticmethod(encode)

    # ── transport ──────────────────────────────────────────────────────────

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        ref = request.url.params.get("ref")
        keys = [request.url.path]
        if ref:
            keys.insert(0, f"{request.url.path}?ref={ref}")
        for key in keys:
            if key in self.routes:
                route = self.routes[key]
                if route == NETWORK_ERROR:
                    raise httpx.ConnectError("connection refused", request=request)
                if callable(route):
                    return route(request)
                # fresh copy per request; routes may be hit more than once
                return httpx.Response(route.status_code, headers=route.headers, content=route.content)
        return httpx.Response(404, json={"message": "Not Found"})

    def client(self, token: str | None = None) -> GitHubClient:
        return GitHubClient(token, transport=httpx.MockTransport(self.handler))

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()
