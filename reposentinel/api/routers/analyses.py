"""Analyses router — run a scan, package a finding for the fix generator."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from reposentinel.api.deps import get_analyzer, get_github_client
from reposentinel.api.schemas.analysis import (
    AnalysisResponse,
    AnalyzeRequest,
    FixRequestBody,
    FixRequestResponse,
)
from reposentinel.core.github import parse_repo_url
from reposentinel.engines.analysis.handoff import RepoContext, build_fix_request
from reposentinel.engines.analysis.runner import RepositoryAnalyzer
from reposentinel.engines.repo_fetcher.content import fetch_file_content
from reposentinel.engines.repo_fetcher.github_client import GitHubClient

router = APIRouter()


@router.post("", response_model=AnalysisResponse)
async def create_analysis(
    body: AnalyzeRequest,
    analyzer: RepositoryAnalyzer = Depends(get_analyzer),
) -> AnalysisResponse:
    result = await analyzer.analyze_repository(body.repo_url)
    return AnalysisResponse.from_result(result)


@router.post("/fix-request", response_model=FixRequestResponse)
async def create_fix_request(
    body: FixRequestBody,
    client: GitHubClient = Depends(get_github_client),
) -> FixRequestResponse:
    ref = parse_repo_url(body.repo_url)
    content = await fetch_file_content(client, ref, body.finding.file_path, body.branch)
    payload = build_fix_request(
        body.finding.to_finding(),
        content,
        RepoContext(name=ref.name, language=body.language, framework=body.framework),
    )
    return FixRequestResponse(**payload)
