"""GitHub repository URL utilities."""

from __future__ import annotations

import re
from dataclasses import dataclass

from reposentinel.exceptions import InvalidUrlError

# owner / name: GitHub's allowed characters, no empty segments
_SEGMENT = r"[A-Za-z0-9_.\-]+"
_HTTPS_RE = re.compile(rf"github\.com/({_SEGMENT})/({_SEGMENT})$", re.IGNORECASE)
_SSH_RE = re.compile(rf"^git@github\.com:({_SEGMENT})/({_SEGMENT})$", re.IGNORECASE)


@dataclass(frozen=True)
class RepositoryRef:
    """An ``owner/name`` pair parsed from a repository URL."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def api_path(self) -> str:
        return f"/repos/{self.owner}/{self.name}"


def parse_repo_url(repo_url: str) -> RepositoryRef:
    """Extract a :class:`RepositoryRef` from a GitHub URL.

    Handles:
      - https://github.com/owner/repo
      - https://github.com/owner/repo.git
      - https://github.com/owner/repo/
      - git@github.com:owner/repo.git

    Raises :class:`InvalidUrlError` if the URL cannot be parsed.
    """
    if not isinstance(repo_url, str):
        raise InvalidUrlError(repr(repo_url))

    cleaned = repo_url.strip().rstrip("/")
    if cleaned.endswith(".git"):
        cleaned = cleaned[:-4]

    match = _SSH_RE.match(cleaned) or _HTTPS_RE.search(cleaned)
    if match is None:
        raise InvalidUrlError(repo_url)

    owner, name = match.group(1), match.group(2)
    if owner in (".", "..") or name in (".", ".."):
        raise InvalidUrlError(repo_url)
    return RepositoryRef(owner=owner, name=name)
