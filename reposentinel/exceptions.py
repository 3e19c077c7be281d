"""Error taxonomy for repository analysis runs."""

from __future__ import annotations


class AnalysisError(Exception):
    """Base exception for all analysis errors.

    ``private_repository`` marks errors where connecting an account (supplying a
    credential) is the actionable next step for the caller.
    """

    code = "analysis_error"
    private_repository = False


class InvalidUrlError(AnalysisError, ValueError):
    """Raised when a URL does not look like ``.../<owner>/<name>[.git]``."""

    code = "invalid_url"

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Invalid GitHub repository URL: {url!r}")


class PrivateOrMissingRepoError(AnalysisError):
    """404 without a credential: the repository is missing or hidden from us.

    This is a heuristic. Without a credential a private repository and a
    nonexistent one look the same, so the more actionable hypothesis is reported.
    """

    code = "private_or_missing_repo"
    private_repository = True


class RepoNotFoundError(AnalysisError):
    """404 with a credential present."""

    code = "repo_not_found"


class AccessDeniedError(AnalysisError):
    """403 that is not a rate limit."""

    code = "access_denied"

    def __init__(self, message: str, *, private_repository: bool = False) -> None:
        self.private_repository = private_repository
        super().__init__(message)


class RateLimitedError(AnalysisError):
    """403 caused by the hosting API's rate limit."""

    code = "rate_limited"

    def __init__(self, *, authenticated: bool) -> None:
        self.authenticated = authenticated
        if authenticated:
            message = "GitHub API rate limit exceeded. Please try again in a few minutes."
        else:
            message = (
                "GitHub API rate limit exceeded. "
                "Connect your GitHub account for higher limits."
            )
        super().__init__(message)


class FetchFailedError(AnalysisError):
    """Catch-all transport or status failure."""

    code = "fetch_failed"

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(message if status is None else f"{message} (HTTP {status})")


class ManifestParseError(AnalysisError):
    """A dependency manifest could not be parsed.

    Raised inside the scanner only; it is absorbed and recorded as a skipped
    item, never surfaced to the caller.
    """

    code = "parse_failure"
