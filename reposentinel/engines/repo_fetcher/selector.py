"""Decide from a path alone whether a file is worth fetching."""

from __future__ import annotations

import re
from collections.abc import Iterable

from reposentinel.engines.repo_fetcher.models import TreeEntry

SOURCE_EXTENSIONS: frozenset[str] = frozenset(
    {"js", "ts", "jsx", "tsx", "py", "java", "go", "rb", "php", "env"}
)

MANIFEST_FILENAMES: tuple[str, ...] = (
    "package.json",
    "package-lock.json",
    "requirements.txt",
    "Gemfile",
    "go.mod",
    "composer.json",
)

SENSITIVE_KEYWORDS: tuple[str, ...] = ("config", "auth", "api", "server", "middleware", "routes")

_EXTENSION_RE = re.compile(r"\.(" + "|".join(sorted(SOURCE_EXTENSIONS)) + r")$")
_KEYWORD_RE = re.compile("|".join(SENSITIVE_KEYWORDS), re.IGNORECASE)


def is_relevant(path: str) -> bool:
    """Return True if *path* is a security-relevant file.

    Matches source extensions, dependency manifests, ``.env`` files anywhere
    in the name, and paths mentioning config/auth/api/server/middleware/routes
    (case-insensitive).
    """
    if _EXTENSION_RE.search(path):
        return True
    if any(path.endswith(name) for name in MANIFEST_FILENAMES):
        return True
    if ".env" in path:
        return True
    return _KEYWORD_RE.search(path) is not None


def select_entries(entries: Iterable[TreeEntry], limit: int = 25) -> list[TreeEntry]:
    """Relevant entries in listing order, truncated to *limit*."""
    selected: list[TreeEntry] = []
    for entry in entries:
        if len(selected) >= limit:
            break
        if is_relevant(entry.path):
            selected.append(entry)
    return selected
