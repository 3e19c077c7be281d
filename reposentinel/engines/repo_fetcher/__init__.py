"""Repository fetcher engine — tree listing, file selection and content fetching."""

from reposentinel.engines.repo_fetcher.content import fetch_all, fetch_file_content
from reposentinel.engines.repo_fetcher.github_client import GitHubClient
from reposentinel.engines.repo_fetcher.models import (
    FetchBatch,
    FetchedFile,
    RepositoryMetadata,
    RepositoryTree,
    SkippedItem,
    TreeEntry,
)
from reposentinel.engines.repo_fetcher.selector import is_relevant, select_entries
from reposentinel.engines.repo_fetcher.tree import fetch_repository, fetch_tree, map_status_error

__all__ = [
    "FetchBatch",
    "FetchedFile",
    "GitHubClient",
    "RepositoryMetadata",
    "RepositoryTree",
    "SkippedItem",
    "TreeEntry",
    "fetch_all",
    "fetch_file_content",
    "fetch_repository",
    "fetch_tree",
    "is_relevant",
    "map_status_error",
    "select_entries",
]
