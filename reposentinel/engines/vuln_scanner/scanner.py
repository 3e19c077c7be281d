"""Apply the detector table to fetched files."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache

import structlog

from reposentinel.engines.repo_fetcher.models import FetchedFile, SkippedItem
from reposentinel.engines.vuln_scanner.models import Finding, ScanReport
from reposentinel.engines.vuln_scanner.patterns import DETECTORS, SNIPPET_LIMIT, Detector
from reposentinel.exceptions import ManifestParseError

log = structlog.get_logger("reposentinel.engine")


@dataclass(frozen=True)
class _Hit:
    line_number: int | None = None
    snippet: str | None = None
    detail: str = ""


@lru_cache(maxsize=None)
def _compile(pattern: str, flags: int) -> re.Pattern[str]:
    return re.compile(pattern, flags)


def _snippet(text: str) -> str:
    return text.strip()[:SNIPPET_LIMIT]


def _line_of(content: str, offset: int) -> int:
    """1-based line number of *offset*."""
    return content.count("\n", 0, offset) + 1


# ── matching policies ─────────────────────────────────────────────────────


def _every_match(detector: Detector, file: FetchedFile, lines: list[str]) -> list[_Hit]:
    regex = _compile(detector.pattern, detector.flags)
    hits: list[_Hit] = []
    for match in regex.finditer(file.content):
        line_number = _line_of(file.content, match.start())
        hits.append(_Hit(line_number, _snippet(lines[line_number - 1])))
    return hits


def _match_text(detector: Detector, file: FetchedFile, lines: list[str]) -> list[_Hit]:
    # The line is resolved from the first occurrence of the matched text, so
    # repeated identical matches all point at the earliest one.
    regex = _compile(detector.pattern, detector.flags)
    hits: list[_Hit] = []
    for match in regex.finditer(file.content):
        text = match.group(0)
        line_number = _line_of(file.content, file.content.find(text))
        hits.append(_Hit(line_number, text[:SNIPPET_LIMIT]))
    return hits


def _file_level(detector: Detector, file: FetchedFile, lines: list[str]) -> list[_Hit]:
    regex = _compile(detector.pattern, detector.flags)
    return [_Hit()] if regex.search(file.content) else []


def _without(detector: Detector, file: FetchedFile, lines: list[str]) -> list[_Hit]:
    if detector.path_keywords and not any(k in file.path for k in detector.path_keywords):
        return []
    present = _compile(detector.pattern, detector.flags).search(file.content)
    if not present:
        return []
    if detector.absent and _compile(detector.absent, detector.flags).search(file.content):
        return []
    return [_Hit()]


def _manifest(detector: Detector, file: FetchedFile, lines: list[str]) -> list[_Hit]:
    if not detector.manifest or detector.manifest not in file.path:
        return []
    try:
        data = json.loads(file.content)
    except (ValueError, RecursionError) as exc:
        raise ManifestParseError(f"{file.path}: {exc}") from exc

    deps = data.get("dependencies") if isinstance(data, dict) else None
    if not isinstance(deps, dict):
        return []

    labels = []
    for rule in detector.stale:
        version = deps.get(rule.package)
        if isinstance(version, str) and re.match(rule.version_pattern, version):
            labels.append(rule.label)
    if not labels:
        return []
    return [_Hit(detail=", ".join(labels))]


def _line_marker(detector: Detector, file: FetchedFile, lines: list[str]) -> list[_Hit]:
    regex = _compile(detector.pattern, detector.flags)
    hits: list[_Hit] = []
    for idx, line in enumerate(lines):
        if detector.max_hits is not None and len(hits) >= detector.max_hits:
            break
        if regex.search(line):
            hits.append(_Hit(idx + 1, _snippet(line)))
    return hits


_POLICIES: dict[str, Callable[[Detector, FetchedFile, list[str]], list[_Hit]]] = {
    "every_match": _every_match,
    "match_text": _match_text,
    "file_level": _file_level,
    "without": _without,
    "manifest": _manifest,
    "line_marker": _line_marker,
}


# ── public ────────────────────────────────────────────────────────────────


def _scan(
    file: FetchedFile,
    detectors: Sequence[Detector],
) -> tuple[list[Finding], list[SkippedItem]]:
    lines = file.content.split("\n")
    findings: list[Finding] = []
    skipped: list[SkippedItem] = []

    for detector in detectors:
        policy = _POLICIES[detector.kind]
        try:
            hits = policy(detector, file, lines)
        except re.error as exc:
            log.warning("scanner.bad_pattern", detector=detector.tag, error=str(exc))
            continue
        except ManifestParseError as exc:
            log.debug("scanner.manifest_unparseable", path=file.path, error=str(exc))
            skipped.append(SkippedItem(file.path, "parse_failure", str(exc)))
            continue

        fields = {"path": file.path, "label": detector.label, "label_lower": detector.label.lower()}
        for hit in hits:
            fields["detail"] = hit.detail
            findings.append(
                Finding(
                    id=f"{file.path}-{detector.tag}-{len(findings)}",
                    severity=detector.severity,
                    category=detector.category,
                    title=detector.title.format(**fields),
                    description=detector.description.format(**fields),
                    file_path=file.path,
                    recommendation=detector.recommendation.format(**fields),
                    line_number=hit.line_number,
                    code_snippet=hit.snippet,
                )
            )
    return findings, skipped


def scan_file(file: FetchedFile, detectors: Sequence[Detector] = DETECTORS) -> list[Finding]:
    """Run every detector over one file, in table order. Never raises."""
    findings, _ = _scan(file, detectors)
    return findings


def scan_files(
    files: Iterable[FetchedFile],
    detectors: Sequence[Detector] = DETECTORS,
) -> ScanReport:
    """Scan files in order and concatenate their findings."""
    report = ScanReport()
    for file in files:
        findings, skipped = _scan(file, detectors)
        report.findings.extend(findings)
        report.skipped.extend(skipped)
    return report
