"""Payload packaging for an external fix generator.

Generating the fix is not done here; this only packages a finding with the
full text of its originating file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from reposentinel.engines.vuln_scanner.models import Finding


@dataclass(frozen=True)
class RepoContext:
    name: str
    language: str | None = None
    framework: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "language": self.language or "unknown"}
        if self.framework:
            data["framework"] = self.framework
        return data


def build_fix_request(
    finding: Finding,
    file_content: str,
    repo_context: RepoContext | None = None,
) -> dict[str, Any]:
    """Return ``{"issue", "fileContent", "repoContext"?}``.

    Raises ``ValueError`` when *file_content* is empty; the generator rejects
    requests without it.
    """
    if not file_content:
        raise ValueError(f"file content is required for finding {finding.id!r}")

    payload: dict[str, Any] = {"issue": finding.to_dict(), "fileContent": file_content}
    if repo_context is not None:
        payload["repoContext"] = repo_context.to_dict()
    return payload
