"""Result record of one analysis run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from reposentinel.engines.analysis.handoff import RepoContext, build_fix_request
from reposentinel.engines.repo_fetcher.models import SkippedItem
from reposentinel.engines.vuln_scanner.models import Finding, SeverityCounts


@dataclass(frozen=True)
class AnalysisResult:
    """Everything one run produced. Built once, never mutated.

    ``file_contents`` holds the text of each file that produced a finding so
    that a finding and its originating file can be handed off together.
    """

    repo_owner: str
    repo_name: str
    repo_url: str
    security_score: int
    counts: SeverityCounts
    findings: list[Finding]
    analyzed_at: datetime
    branch: str | None = None
    language: str | None = None
    files_scanned: int = 0
    skipped: list[SkippedItem] = field(default_factory=list)
    file_contents: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def total_issues(self) -> int:
        return self.counts.total

    def get_finding(self, finding_id: str) -> Finding | None:
        for finding in self.findings:
            if finding.id == finding_id:
                return finding
        return None

    def fix_request(
        self, finding_id: str, *, framework: str | None = None
    ) -> dict[str, Any]:
        """Handoff payload for the fix generator.

        Raises ``KeyError`` if the finding or its file text is unknown.
        """
        finding = self.get_finding(finding_id)
        if finding is None:
            raise KeyError(finding_id)
        content = self.file_contents[finding.file_path]
        context = RepoContext(name=self.repo_name, language=self.language, framework=framework)
        return build_fix_request(finding, content, context)

    def to_dict(self) -> dict[str, Any]:
        """camelCase summary as shown to presentation code (no file text)."""
        return {
            "repoOwner": self.repo_owner,
            "repoName": self.repo_name,
            "repoUrl": self.repo_url,
            "securityScore": self.security_score,
            "totalIssues": self.total_issues,
            "criticalCount": self.counts.critical,
            "highCount": self.counts.high,
            "mediumCount": self.counts.medium,
            "lowCount": self.counts.low,
            "issues": [f.to_dict() for f in self.findings],
            "analyzedAt": self.analyzed_at.isoformat(),
        }
