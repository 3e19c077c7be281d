"""Data models for the repository fetcher engine."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RepositoryMetadata:
    """Subset of ``GET /repos/{owner}/{name}`` we care about."""

    full_name: str
    default_branch: str | None = None
    language: str | None = None


@dataclass(frozen=True)
class TreeEntry:
    """One blob row of a recursive tree listing."""

    path: str
    size: int | None = None


@dataclass(frozen=True)
class RepositoryTree:
    """A tree listing plus the branch it was read from."""

    branch: str
    entries: list[TreeEntry]
    truncated: bool = False


@dataclass(frozen=True)
class FetchedFile:
    """Decoded text of one repository file."""

    path: str
    content: str
    size: int


@dataclass(frozen=True)
class SkippedItem:
    """A file or detector that was dropped from a run, with the reason."""

    path: str
    reason: str  # too_large | http_<status> | network_error | missing_content | decode_error | parse_failure
    detail: str | None = None


@dataclass
class FetchBatch:
    """Result of fetching a batch of files: successes plus the side channel."""

    files: list[FetchedFile] = field(default_factory=list)
    skipped: list[SkippedItem] = field(default_factory=list)
