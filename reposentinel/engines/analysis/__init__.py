"""Analysis engine — pipeline orchestration and the fix handoff."""

from reposentinel.engines.analysis.handoff import RepoContext, build_fix_request
from reposentinel.engines.analysis.models import AnalysisResult
from reposentinel.engines.analysis.runner import RepositoryAnalyzer, analyze_repository

__all__ = [
    "AnalysisResult",
    "RepoContext",
    "RepositoryAnalyzer",
    "analyze_repository",
    "build_fix_request",
]
