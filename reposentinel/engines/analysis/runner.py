"""Analysis pipeline: URL to scored findings in one run."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from reposentinel.core.config import Settings
from reposentinel.core.github import parse_repo_url
from reposentinel.engines.analysis.models import AnalysisResult
from reposentinel.engines.repo_fetcher.content import fetch_all
from reposentinel.engines.repo_fetcher.github_client import GitHubClient
from reposentinel.engines.repo_fetcher.selector import select_entries
from reposentinel.engines.repo_fetcher.tree import fetch_repository, fetch_tree
from reposentinel.engines.vuln_scanner.scanner import scan_files
from reposentinel.engines.vuln_scanner.scorer import compute_score, count_by_severity

log = structlog.get_logger("reposentinel.engine")


async def analyze_repository(
    repo_url: str,
    *,
    token: str | None = None,
    settings: Settings | None = None,
    client: GitHubClient | None = None,
) -> AnalysisResult:
    """Run the full pipeline for *repo_url*.

    parse URL -> metadata probe -> tree (branch fallback) -> select ->
    concurrent fetch -> scan -> count -> score.

    Errors from URL parsing and tree retrieval propagate unchanged; content
    and detector failures only drop the affected item (see ``skipped``).

    *token* is ignored when a ready *client* is passed; the client carries its
    own credential.
    """
    settings = settings or Settings()
    ref = parse_repo_url(repo_url)

    owns_client = client is None
    if client is None:
        client = GitHubClient(token, base_url=settings.api_url, timeout=settings.http_timeout)

    log.info("analysis.started", repo=ref.full_name, authenticated=client.authenticated)
    try:
        metadata = await fetch_repository(client, ref)
        tree = await fetch_tree(client, ref, branches=settings.branches)
        entries = select_entries(tree.entries, limit=settings.max_files)
        log.info(
            "analysis.tree_loaded",
            repo=ref.full_name,
            branch=tree.branch,
            default_branch=metadata.default_branch,
            entries=len(tree.entries),
            selected=len(entries),
            truncated=tree.truncated,
        )
        batch = await fetch_all(client, ref, entries, max_size=settings.max_file_size)
    finally:
        if owns_client:
            await client.close()

    report = scan_files(batch.files)
    counts = count_by_severity(report.findings)
    score = compute_score(counts)

    flagged = {f.file_path for f in report.findings}
    result = AnalysisResult(
        repo_owner=ref.owner,
        repo_name=ref.name,
        repo_url=repo_url,
        security_score=score,
        counts=counts,
        findings=report.findings,
        analyzed_at=datetime.now(timezone.utc),
        branch=tree.branch,
        language=metadata.language,
        files_scanned=len(batch.files),
        skipped=batch.skipped + report.skipped,
        file_contents={f.path: f.content for f in batch.files if f.path in flagged},
    )
    log.info(
        "analysis.completed",
        repo=ref.full_name,
        score=score,
        total_issues=counts.total,
        files_scanned=result.files_scanned,
        skipped=len(result.skipped),
    )
    return result


class RepositoryAnalyzer:
    """Holds an optional credential for callers that set it once up front.

    The credential is read at the start of each run and passed explicitly to
    that run's client; changing it mid-run has no effect on the run.
    """

    def __init__(self, settings: Settings | None = None, token: str | None = None) -> None:
        self._settings = settings or Settings()
        self._token = token or None

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    def set_credential(self, token: str | None) -> None:
        self._token = token or None

    async def analyze_repository(self, repo_url: str) -> AnalysisResult:
        return await analyze_repository(repo_url, token=self._token, settings=self._settings)
