"""Concurrent per-file content retrieval with soft failures."""

from __future__ import annotations

import asyncio
import base64
import binascii
from collections.abc import Sequence
from urllib.parse import quote

import httpx
import structlog

from reposentinel.core.github import RepositoryRef
from reposentinel.engines.repo_fetcher.github_client import GitHubClient
from reposentinel.engines.repo_fetcher.models import (
    FetchBatch,
    FetchedFile,
    SkippedItem,
    TreeEntry,
)
from reposentinel.exceptions import FetchFailedError

log = structlog.get_logger("reposentinel.engine")

MAX_FILE_SIZE = 100_000


def decode_content(encoded: str) -> str:
    """Decode a contents-API ``content`` field (base64 with embedded newlines)."""
    raw = base64.b64decode(encoded.replace("\n", ""), validate=False)
    return raw.decode("utf-8", errors="replace")


def _contents_path(ref: RepositoryRef, path: str) -> str:
    return f"{ref.api_path}/contents/{quote(path, safe='/')}"


async def fetch_all(
    client: GitHubClient,
    ref: RepositoryRef,
    entries: Sequence[TreeEntry],
    *,
    max_size: int = MAX_FILE_SIZE,
) -> FetchBatch:
    """Fetch every entry concurrently; results keep the input order.

    A file is dropped (and recorded in ``skipped``) on a network error, a
    non-success status, a missing ``content`` field, or a size of *max_size*
    bytes or more. Nothing here aborts the batch.
    """
    results = await asyncio.gather(
        *(_fetch_one(client, ref, entry, max_size) for entry in entries)
    )

    batch = FetchBatch()
    for result in results:
        if isinstance(result, FetchedFile):
            batch.files.append(result)
        else:
            batch.skipped.append(result)
            log.debug("content.skipped", path=result.path, reason=result.reason)
    return batch


async def _fetch_one(
    client: GitHubClient,
    ref: RepositoryRef,
    entry: TreeEntry,
    max_size: int,
) -> FetchedFile | SkippedItem:
    # Tree sizes are authoritative for blobs; skip the request outright.
    if entry.size is not None and entry.size >= max_size:
        return SkippedItem(entry.path, "too_large", f"{entry.size} bytes")

    try:
        response = await client.get(_contents_path(ref, entry.path))
    except httpx.RequestError as exc:
        return SkippedItem(entry.path, "network_error", str(exc))

    if not response.is_success:
        return SkippedItem(entry.path, f"http_{response.status_code}")

    try:
        data = response.json()
    except ValueError:
        return SkippedItem(entry.path, "missing_content", "response is not JSON")
    if not isinstance(data, dict) or not isinstance(data.get("content"), str) or not data["content"]:
        return SkippedItem(entry.path, "missing_content")

    size = data.get("size")
    if not isinstance(size, int):
        size = entry.size if entry.size is not None else 0
    if size >= max_size:
        return SkippedItem(entry.path, "too_large", f"{size} bytes")

    try:
        text = decode_content(data["content"])
    except (binascii.Error, ValueError) as exc:
        return SkippedItem(entry.path, "decode_error", str(exc))
    return FetchedFile(path=entry.path, content=text, size=size)


async def fetch_file_content(
    client: GitHubClient,
    ref: RepositoryRef,
    path: str,
    branch: str = "main",
    *,
    fallback_branch: str = "master",
) -> str:
    """Fetch one file's text at *branch*.

    When *branch* is ``main`` and the request fails, retries once on
    *fallback_branch*. Raises :class:`FetchFailedError` on failure.
    """
    url = _contents_path(ref, path)
    try:
        response = await client.get(url, params={"ref": branch})
        if not response.is_success and branch == "main":
            log.info("content.fallback", repo=ref.full_name, path=path, to_branch=fallback_branch)
            response = await client.get(url, params={"ref": fallback_branch})
    except httpx.RequestError as exc:
        raise FetchFailedError(None, f"Failed to fetch file: {exc}") from exc

    if not response.is_success:
        raise FetchFailedError(
            response.status_code, f"Failed to fetch file: {response.reason_phrase}"
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise FetchFailedError(response.status_code, "File content not available") from exc
    if not isinstance(data, dict) or not isinstance(data.get("content"), str) or not data["content"]:
        raise FetchFailedError(response.status_code, "File content not available")

    try:
        return decode_content(data["content"])
    except (binascii.Error, ValueError) as exc:
        raise FetchFailedError(response.status_code, "File content not available") from exc
