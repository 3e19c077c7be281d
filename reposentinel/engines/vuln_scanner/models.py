"""Data models for the vulnerability scanner engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from reposentinel.engines.repo_fetcher.models import SkippedItem

Severity = Literal["critical", "high", "medium", "low"]

SEVERITIES: tuple[Severity, ...] = ("critical", "high", "medium", "low")


@dataclass(frozen=True)
class Finding:
    """A single reported security issue.

    ``id`` is ``<file path>-<detector tag>-<n>`` where *n* counts the findings
    already emitted for that file, so identical input yields identical ids.
    """

    id: str
    severity: Severity
    category: str
    title: str
    description: str
    file_path: str
    recommendation: str
    line_number: int | None = None
    code_snippet: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """camelCase payload, optional keys omitted when empty."""
        data: dict[str, Any] = {
            "id": self.id,
            "severity": self.severity,
            "category": self.category,
            "title": self.title,
            "description": self.description,
            "filePath": self.file_path,
        }
        if self.line_number is not None:
            data["lineNumber"] = self.line_number
        if self.code_snippet is not None:
            data["codeSnippet"] = self.code_snippet
        data["recommendation"] = self.recommendation
        return data


@dataclass(frozen=True)
class SeverityCounts:
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.critical + self.high + self.medium + self.low


@dataclass
class ScanReport:
    """Findings for a batch of files, plus soft-failed detectors."""

    findings: list[Finding] = field(default_factory=list)
    skipped: list[SkippedItem] = field(default_factory=list)
