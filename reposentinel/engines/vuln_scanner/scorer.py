"""Severity-weighted logarithmic decay score."""

from __future__ import annotations

import math
from collections.abc import Iterable

from reposentinel.engines.vuln_scanner.models import Finding, SeverityCounts

# (weight, cap); cap None means uncapped
SEVERITY_PENALTIES: dict[str, tuple[float, float | None]] = {
    "critical": (25, None),
    "high": (15, None),
    "medium": (8, 20),
    "low": (4, 10),
}


def count_by_severity(findings: Iterable[Finding]) -> SeverityCounts:
    tally = dict.fromkeys(SEVERITY_PENALTIES, 0)
    for finding in findings:
        tally[finding.severity] += 1
    return SeverityCounts(**tally)


def _penalty(severity: str, count: int) -> float:
    if count <= 0:
        return 0.0
    weight, cap = SEVERITY_PENALTIES[severity]
    penalty = weight * math.log2(count + 1)
    return penalty if cap is None else min(cap, penalty)


def compute_score(counts: SeverityCounts) -> int:
    """Score in [0, 100]; 100 means no findings.

    Each bucket subtracts ``weight * log2(count + 1)``, so the first finding
    of a severity costs the most. Halves round up.
    """
    score = 100.0
    for severity in SEVERITY_PENALTIES:
        score -= _penalty(severity, getattr(counts, severity))
    return max(0, math.floor(score + 0.5))
