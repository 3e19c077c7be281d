"""CLI entry point: reposentinel.

Subcommands:
    reposentinel analyze https://github.com/owner/repo   # fetch + scan + score
    reposentinel scan src/server.js package.json         # scan local files only
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import sys
from pathlib import Path

import click

from reposentinel.core.config import Settings
from reposentinel.core.logging import setup_logging
from reposentinel.engines.analysis.runner import analyze_repository
from reposentinel.engines.repo_fetcher.models import FetchedFile
from reposentinel.engines.vuln_scanner.models import SEVERITIES, Finding
from reposentinel.engines.vuln_scanner.scanner import scan_files
from reposentinel.engines.vuln_scanner.scorer import compute_score, count_by_severity
from reposentinel.exceptions import AnalysisError

_SEVERITY_COLORS = {"critical": "red", "high": "magenta", "medium": "yellow", "low": "cyan"}


def _echo_findings(findings: list[Finding]) -> None:
    for f in findings:
        where = f.file_path if f.line_number is None else f"{f.file_path}:{f.line_number}"
        tag = click.style(f"[{f.severity.upper()}]", fg=_SEVERITY_COLORS[f.severity])
        click.echo(f"  {tag} {f.title} ({where})")
        if f.code_snippet:
            click.echo(f"      {f.code_snippet}")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """RepoSentinel: lexical security scan of GitHub repositories."""
    setup_logging("DEBUG" if verbose else None)


@main.command("analyze")
@click.argument("repo_url")
@click.option("--token", default=None, help="GitHub token (default: $GITHUB_TOKEN)")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option(
    "--fail-under",
    type=click.IntRange(0, 100),
    default=None,
    help="Exit with status 2 if the score is below this value",
)
def analyze(repo_url: str, token: str | None, as_json: bool, fail_under: int | None) -> None:
    """Fetch, scan and score a GitHub repository."""
    try:
        settings = Settings.from_env()
    except ValueError as e:
        click.echo(f"Error: invalid configuration: {e}", err=True)
        sys.exit(1)

    try:
        result = asyncio.run(
            analyze_repository(repo_url, token=token or settings.github_token, settings=settings)
        )
    except AnalysisError as e:
        click.echo(f"Error: {e}", err=True)
        if e.private_repository:
            click.echo("Hint: pass --token or set GITHUB_TOKEN to access private repositories.", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(f"{result.repo_owner}/{result.repo_name} ({result.branch})")
        click.echo(f"  Security score: {result.security_score}/100")
        click.echo(f"  Files scanned: {result.files_scanned} (skipped: {len(result.skipped)})")
        counts = ", ".join(f"{s}: {getattr(result.counts, s)}" for s in SEVERITIES)
        click.echo(f"  Issues: {result.total_issues} ({counts})")
        if result.findings:
            click.echo("")
            _echo_findings(result.findings)

    if fail_under is not None and result.security_score < fail_under:
        sys.exit(2)


@main.command("scan")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print findings as JSON")
def scan(paths: tuple[str, ...], as_json: bool) -> None:
    """Run the detectors over local files (no network)."""
    files = []
    for p in paths:
        text = Path(p).read_text(encoding="utf-8", errors="replace")
        files.append(FetchedFile(path=Path(p).as_posix(), content=text, size=len(text.encode())))

    report = scan_files(files)
    counts = count_by_severity(report.findings)
    score = compute_score(counts)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "securityScore": score,
                    "counts": dataclasses.asdict(counts),
                    "issues": [f.to_dict() for f in report.findings],
                },
                indent=2,
            )
        )
        return

    click.echo(f"Security score: {score}/100 ({counts.total} issues)")
    _echo_findings(report.findings)
