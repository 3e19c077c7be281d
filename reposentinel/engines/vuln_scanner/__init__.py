"""Vulnerability scanner engine — lexical detectors and scoring."""

from reposentinel.engines.vuln_scanner.models import (
    SEVERITIES,
    Finding,
    ScanReport,
    Severity,
    SeverityCounts,
)
from reposentinel.engines.vuln_scanner.patterns import DETECTORS, Detector, StaleRule
from reposentinel.engines.vuln_scanner.scanner import scan_file, scan_files
from reposentinel.engines.vuln_scanner.scorer import compute_score, count_by_severity

__all__ = [
    "DETECTORS",
    "Detector",
    "Finding",
    "SEVERITIES",
    "ScanReport",
    "Severity",
    "SeverityCounts",
    "StaleRule",
    "compute_score",
    "count_by_severity",
    "scan_file",
    "scan_files",
]
