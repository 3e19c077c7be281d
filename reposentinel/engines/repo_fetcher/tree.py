"""Metadata probe and recursive tree listing with branch fallback."""

from __future__ import annotations

from typing import Literal

import httpx
import structlog

from reposentinel.core.github import RepositoryRef
from reposentinel.engines.repo_fetcher.github_client import GitHubClient
from reposentinel.engines.repo_fetcher.models import RepositoryMetadata, RepositoryTree, TreeEntry
from reposentinel.exceptions import (
    AccessDeniedError,
    AnalysisError,
    FetchFailedError,
    PrivateOrMissingRepoError,
    RateLimitedError,
    RepoNotFoundError,
)

log = structlog.get_logger("reposentinel.engine")

Stage = Literal["metadata", "tree"]

_CONNECT_HINT = "please connect your GitHub account to access it."

_NOT_FOUND_ANONYMOUS: dict[Stage, str] = {
    "metadata": f"Repository not found. If this is a private repository, {_CONNECT_HINT}",
    "tree": f"Repository tree not found. If this is a private repository, {_CONNECT_HINT}",
}
_NOT_FOUND_AUTHENTICATED: dict[Stage, str] = {
    "metadata": "Repository not found. Please check the URL.",
    "tree": "Repository not found or branch does not exist.",
}
_FAILED: dict[Stage, str] = {
    "metadata": "Failed to fetch repository",
    "tree": "Failed to fetch repository tree. The repository may be empty or inaccessible.",
}
_NETWORK_FAILED: dict[Stage, str] = {
    "metadata": "Network error. Please check your connection and try again.",
    "tree": "Network error while fetching repository contents.",
}


def map_status_error(
    response: httpx.Response,
    *,
    authenticated: bool,
    stage: Stage = "tree",
) -> AnalysisError:
    """Translate a non-success response into a typed error.

    The 404 split on *authenticated* is a heuristic: anonymous callers cannot
    tell a private repository from a missing one, so they get the
    private-repository hypothesis.
    """
    status = response.status_code
    if status == 404:
        if not authenticated:
            return PrivateOrMissingRepoError(_NOT_FOUND_ANONYMOUS[stage])
        return RepoNotFoundError(_NOT_FOUND_AUTHENTICATED[stage])

    if status == 403:
        if GitHubClient.is_rate_limited(response):
            return RateLimitedError(authenticated=authenticated)
        if not authenticated:
            return AccessDeniedError(
                "Access denied. This repository appears to be private. "
                "Please connect your GitHub account to access it.",
                private_repository=True,
            )
        return AccessDeniedError(
            "Access denied. You may not have permission to access this repository."
        )

    message = _FAILED[stage]
    if stage == "metadata":
        message = f"{message}: {GitHubClient.error_message(response) or response.reason_phrase}"
    return FetchFailedError(status, message)


async def fetch_repository(client: GitHubClient, ref: RepositoryRef) -> RepositoryMetadata:
    """Probe ``GET /repos/{owner}/{name}`` for existence and basic metadata."""
    try:
        response = await client.get(ref.api_path)
    except httpx.RequestError as exc:
        log.warning("repository.network_error", repo=ref.full_name, error=str(exc))
        raise FetchFailedError(None, _NETWORK_FAILED["metadata"]) from exc

    if not response.is_success:
        raise map_status_error(response, authenticated=client.authenticated, stage="metadata")

    data = _json_object(response)
    return RepositoryMetadata(
        full_name=data.get("full_name") or ref.full_name,
        default_branch=data.get("default_branch"),
        language=data.get("language"),
    )


async def fetch_tree(
    client: GitHubClient,
    ref: RepositoryRef,
    *,
    branches: tuple[str, str] = ("main", "master"),
) -> RepositoryTree:
    """Fetch the recursive tree of the first branch, falling back once to the second.

    Any non-success (or network failure) on the first branch triggers exactly
    one request against the second. If that fails too, the second response is
    mapped by :func:`map_status_error`.
    """
    primary, fallback = branches
    last_response: httpx.Response | None = None
    last_exc: httpx.RequestError | None = None

    for attempt, branch in enumerate((primary, fallback)):
        if attempt:
            log.info("tree.fallback", repo=ref.full_name, from_branch=primary, to_branch=branch)
        try:
            response = await client.get(
                f"{ref.api_path}/git/trees/{branch}", params={"recursive": "1"}
            )
        except httpx.RequestError as exc:
            log.warning("tree.network_error", repo=ref.full_name, branch=branch, error=str(exc))
            last_exc, last_response = exc, None
            continue

        if response.is_success:
            return _parse_tree(_json_object(response), branch)
        last_exc, last_response = None, response

    if last_response is None:
        raise FetchFailedError(None, _NETWORK_FAILED["tree"]) from last_exc
    raise map_status_error(last_response, authenticated=client.authenticated, stage="tree")


def _json_object(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError as exc:
        raise FetchFailedError(response.status_code, "Unexpected response from GitHub API") from exc
    if not isinstance(data, dict):
        raise FetchFailedError(response.status_code, "Unexpected response from GitHub API")
    return data


def _parse_tree(data: dict, branch: str) -> RepositoryTree:
    """Keep blob rows only, in listing order. Malformed rows are dropped."""
    entries: list[TreeEntry] = []
    items = data.get("tree")
    for item in items if isinstance(items, list) else []:
        if not isinstance(item, dict) or not isinstance(item.get("path"), str):
            continue
        if item.get("type", "blob") != "blob" or not item.get("path"):
            continue
        size = item.get("size")
        entries.append(TreeEntry(path=item["path"], size=size if isinstance(size, int) else None))
    return RepositoryTree(branch=branch, entries=entries, truncated=bool(data.get("truncated")))
