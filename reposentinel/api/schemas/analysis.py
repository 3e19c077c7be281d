"""Analysis request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, field_validator

from reposentinel.engines.analysis.models import AnalysisResult
from reposentinel.engines.vuln_scanner.models import Finding


class AnalyzeRequest(BaseModel):
    repo_url: str

    @field_validator("repo_url", mode="before")
    @classmethod
    def _strip_whitespace(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class FindingSchema(BaseModel):
    id: str
    severity: Literal["critical", "high", "medium", "low"]
    category: str
    title: str
    description: str
    file_path: str
    line_number: int | None = None
    code_snippet: str | None = None
    recommendation: str

    @classmethod
    def from_finding(cls, finding: Finding) -> FindingSchema:
        return cls(
            id=finding.id,
            severity=finding.severity,
            category=finding.category,
            title=finding.title,
            description=finding.description,
            file_path=finding.file_path,
            line_number=finding.line_number,
            code_snippet=finding.code_snippet,
            recommendation=finding.recommendation,
        )

    def to_finding(self) -> Finding:
        return Finding(**self.model_dump())


class SeverityCountsSchema(BaseModel):
    critical: int
    high: int
    medium: int
    low: int


class SkippedItemSchema(BaseModel):
    path: str
    reason: str
    detail: str | None = None


class AnalysisResponse(BaseModel):
    repo_owner: str
    repo_name: str
    repo_url: str
    security_score: int
    total_issues: int
    counts: SeverityCountsSchema
    findings: list[FindingSchema]
    analyzed_at: datetime
    branch: str | None
    language: str | None
    files_scanned: int
    skipped: list[SkippedItemSchema]

    @classmethod
    def from_result(cls, result: AnalysisResult) -> AnalysisResponse:
        return cls(
            repo_owner=result.repo_owner,
            repo_name=result.repo_name,
            repo_url=result.repo_url,
            security_score=result.security_score,
            total_issues=result.total_issues,
            counts=SeverityCountsSchema(
                critical=result.counts.critical,
                high=result.counts.high,
                medium=result.counts.medium,
                low=result.counts.low,
            ),
            findings=[FindingSchema.from_finding(f) for f in result.findings],
            analyzed_at=result.analyzed_at,
            branch=result.branch,
            language=result.language,
            files_scanned=result.files_scanned,
            skipped=[
                SkippedItemSchema(path=s.path, reason=s.reason, detail=s.detail)
                for s in result.skipped
            ],
        )


class FixRequestBody(BaseModel):
    repo_url: str
    finding: FindingSchema
    branch: str = "main"
    language: str | None = None
    framework: str | None = None


class FixRequestResponse(BaseModel):
    """Payload for the external fix generator, keys as it expects them."""

    issue: dict[str, Any]
    fileContent: str  # noqa: N815
    repoContext: dict[str, Any] | None = None  # noqa: N815
