"""Pattern library: the static detector table.

Each row is a :class:`Detector`; ``kind`` selects the matching policy in
:mod:`scanner`. Adding a detector means adding a row here.

Message templates are ``str.format`` strings and may use ``{path}``,
``{label}``, ``{label_lower}`` and ``{detail}``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from reposentinel.engines.vuln_scanner.models import Severity

DetectorKind = Literal[
    "every_match",  # every regex match, line taken from the match offset
    "match_text",  # every regex match, line taken from the first occurrence of the matched text
    "file_level",  # at most one finding per file, no line number
    "without",  # pattern present and ``absent`` missing (optionally gated on path keywords)
    "manifest",  # parse a JSON manifest and compare pinned versions
    "line_marker",  # per-line search, capped at ``max_hits`` lines
]

SNIPPET_LIMIT = 100


@dataclass(frozen=True)
class StaleRule:
    """``package`` pinned to a version matching ``version_pattern`` is stale."""

    package: str
    version_pattern: str
    label: str


@dataclass(frozen=True)
class Detector:
    tag: str
    kind: DetectorKind
    category: str
    severity: Severity
    title: str
    description: str
    recommendation: str
    pattern: str = ""
    flags: int = 0
    label: str = ""
    absent: str | None = None
    path_keywords: tuple[str, ...] = ()
    manifest: str | None = None
    stale: tuple[StaleRule, ...] = ()
    max_hits: int | None = None


# ── secrets ───────────────────────────────────────────────────────────────

_SECRET_DESCRIPTION = (
    "Found hardcoded {label_lower} in {path}. Exposed credentials can be "
    "discovered and exploited by malicious actors."
)
_SECRET_RECOMMENDATION = (
    "Immediately move this {label_lower} to environment variables (.env file) "
    "and add .env to .gitignore. Rotate the exposed credential."
)


def _secret(label: str, pattern: str, flags: int = 0) -> Detector:
    return Detector(
        tag="secret",
        kind="every_match",
        category="Exposed Secrets",
        severity="critical",
        title="{label} Exposed in Code",
        description=_SECRET_DESCRIPTION,
        recommendation=_SECRET_RECOMMENDATION,
        pattern=pattern,
        flags=flags,
        label=label,
    )


SECRET_DETECTORS: tuple[Detector, ...] = (
    _secret(
        "API Key",
        r"""(?:api[_-]?key|apikey|api_key_id)\s*[:=]\s*['"][a-zA-Z0-9_\-]{20,}['"]""",
        re.IGNORECASE,
    ),
    _secret(
        "Password",
        r"""(?:password|passwd|pwd)\s*[:=]\s*['"][^'"]{6,}['"]""",
        re.IGNORECASE,
    ),
    _secret(
        "Secret",
        r"""(?:secret|token|auth[_-]?token)\s*[:=]\s*['"][^'"]{15,}['"]""",
        re.IGNORECASE,
    ),
    _secret("API Key", r"sk-[a-zA-Z0-9]{20,}"),
    _secret("GitHub Token", r"ghp_[a-zA-Z0-9]{36,}"),
    _secret("AWS Access Key", r"AKIA[0-9A-Z]{16}"),
)

# ── injection ─────────────────────────────────────────────────────────────

_SQL_DESCRIPTION = (
    "{label} detected in {path}. This pattern is vulnerable to SQL injection "
    "attacks where attackers can manipulate queries."
)
_SQL_RECOMMENDATION = (
    "Use parameterized queries or prepared statements. Never construct SQL "
    "queries using string concatenation or template literals with user input."
)


def _sql(label: str, pattern: str) -> Detector:
    return Detector(
        tag="sql",
        kind="match_text",
        category="SQL Injection",
        severity="critical",
        title="Potential SQL Injection Vulnerability",
        description=_SQL_DESCRIPTION,
        recommendation=_SQL_RECOMMENDATION,
        pattern=pattern,
        flags=re.IGNORECASE,
        label=label,
    )


INJECTION_DETECTORS: tuple[Detector, ...] = (
    _sql(
        "String interpolation in SQL query",
        r"""(?:execute|query|run)\s*\(\s*['"`].*\$\{.*\}.*['"`]""",
    ),
    _sql(
        "String concatenation in SQL query",
        r"""(?:execute|query|run)\s*\(\s*['"`].*\+.*['"`]""",
    ),
    _sql(
        "Template literal in SQL WHERE clause",
        r"""['"`]\s*SELECT\s+.*FROM\s+.*WHERE\s+.*\$\{""",
    ),
)

# ── unsafe rendering ──────────────────────────────────────────────────────


def _xss(label: str, pattern: str) -> Detector:
    return Detector(
        tag="xss",
        kind="match_text",
        category="XSS Vulnerability",
        severity="high",
        title="Potential Cross-Site Scripting (XSS) Risk",
        description=(
            "{label} found in {path}. This can allow attackers to inject malicious scripts."
        ),
        recommendation=(
            "Sanitize all user input before rendering. Use safe rendering methods "
            "and avoid dangerouslySetInnerHTML or innerHTML with untrusted data."
        ),
        pattern=pattern,
        flags=re.IGNORECASE,
        label=label,
    )


RENDERING_DETECTORS: tuple[Detector, ...] = (
    _xss("Direct HTML injection", r"dangerouslySetInnerHTML|innerHTML\s*="),
    _xss("Use of eval() function", r"eval\s*\("),
)

# ── configuration ─────────────────────────────────────────────────────────

CORS_DETECTOR = Detector(
    tag="cors",
    kind="file_level",
    category="CORS Misconfiguration",
    severity="high",
    title="Overly Permissive CORS Policy",
    description=(
        "Wildcard (*) CORS origin detected in {path}. This allows any website "
        "to make requests to your API."
    ),
    recommendation=(
        'Specify allowed origins explicitly instead of using "*". '
        "Use a whitelist of trusted domains."
    ),
    pattern=r"""cors\s*\(\s*\{[\s\S]*origin:\s*['"]?\*['"]?""",
    flags=re.IGNORECASE,
)

CLEARTEXT_DETECTOR = Detector(
    tag="http",
    kind="without",
    category="Insecure Communication",
    severity="medium",
    title="Insecure HTTP Communication",
    description=(
        "HTTP module usage without HTTPS detected in {path}. "
        "Data transmitted over HTTP is not encrypted."
    ),
    recommendation=(
        "Use HTTPS for all network communications to encrypt data in transit. "
        "Implement TLS/SSL certificates."
    ),
    pattern=r"""require\s*\(\s*['"]http['"]\s*\)""",
    absent=r"""require\s*\(\s*['"]https['"]\s*\)""",
)

DEPENDENCY_DETECTOR = Detector(
    tag="outdated",
    kind="manifest",
    category="Outdated Dependencies",
    severity="medium",
    title="Outdated Package Versions Detected",
    description=(
        "Old versions of {detail} found in {path}. Outdated packages may contain "
        "known security vulnerabilities."
    ),
    recommendation=(
        "Update dependencies to their latest stable versions. "
        "Run npm audit to check for known vulnerabilities."
    ),
    manifest="package.json",
    stale=(
        StaleRule("react", r"^[~^]?16\.", "React 16"),
        StaleRule("express", r"^[~^]?3\.", "Express 3"),
    ),
)

HEADERS_DETECTOR = Detector(
    tag="headers",
    kind="without",
    category="Missing Security Headers",
    severity="medium",
    title="Missing Security Headers Middleware",
    description=(
        "Express server in {path} doesn't appear to use security headers "
        "middleware like Helmet."
    ),
    recommendation=(
        "Install and configure helmet middleware to set security headers "
        "(CSP, X-Frame-Options, etc.): npm install helmet"
    ),
    pattern=re.escape("express()"),
    absent="helmet",
    path_keywords=("server", "app"),
)

# ── code quality ──────────────────────────────────────────────────────────

MARKER_DETECTOR = Detector(
    tag="todo",
    kind="line_marker",
    category="Code Quality",
    severity="low",
    title="Unresolved TODO/FIXME Comment",
    description=(
        "Found unresolved comment in {path} that may indicate incomplete "
        "implementation or known issues."
    ),
    recommendation=(
        "Review and resolve TODO/FIXME comments before deploying to production. "
        "Ensure all code is complete and tested."
    ),
    pattern=r"TODO|FIXME|HACK|XXX",
    flags=re.IGNORECASE,
    max_hits=2,
)

DETECTORS: tuple[Detector, ...] = (
    *SECRET_DETECTORS,
    *INJECTION_DETECTORS,
    *RENDERING_DETECTORS,
    CORS_DETECTOR,
    CLEARTEXT_DETECTOR,
    DEPENDENCY_DETECTOR,
    HEADERS_DETECTOR,
    MARKER_DETECTOR,
)
