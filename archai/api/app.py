"""Main FastAPI application for the Archai REST API."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import uvicorn

from .. import __version__
from ..analyzer import analyze_archive, analyze_manifest, analyze_repository, demo_graph
from ..analyzer.errors import ExternalServiceError, InputFormatError
from ..analyzer.fetcher import fetch_repository
from ..analyzer.models import ArchitectureGraph
from ..config import Settings
from ..narrative import generate_insights, split_sections

logger = logging.getLogger(__name__)


# Pydantic models
class ManifestRequest(BaseModel):
    text: str
    file_name: str = "docker-compose.yml"


class PathsRequest(BaseModel):
    paths: List[str]
    file_name: str = "upload.zip"
    manifest_text: Optional[str] = None


class GithubRequest(BaseModel):
    url: str


class InsightsRequest(BaseModel):
    graph: Dict[str, Any]
    readme: Optional[str] = None
    description: Optional[str] = None
    repo_name: Optional[str] = None
    provider: Optional[str] = None


class GraphResponse(BaseModel):
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]


class RepositoryResponse(BaseModel):
    name: str
    html_url: str
    default_branch: str
    description: str = ""
    readme: str = ""
    graph: GraphResponse


class InsightsResponse(BaseModel):
    insights: str
    sections: List[Dict[str, str]] = Field(default_factory=list)


# Create FastAPI app
app = FastAPI(
    title="Archai API",
    description="Repository architecture inference and onboarding narratives",
    version=__version__,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _graph_response(graph: ArchitectureGraph) -> GraphResponse:
    data = graph.to_dict()
    return GraphResponse(nodes=data["nodes"], edges=data["edges"])


def _input_error(e: InputFormatError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={
            "code": "invalid_manifest",
            "message": str(e),
            "hint": "The manifest needs a top-level 'services' mapping",
        },
    )


def _external_error(e: ExternalServiceError) -> HTTPException:
    if e.status_code == 404:
        return HTTPException(
            status_code=404,
            detail={"code": "repository_not_found", "message": str(e), "hint": "Check the repository URL"},
        )
    if e.status_code == 429:
        return HTTPException(
            status_code=429,
            detail={"code": "rate_limited", "message": str(e), "hint": "Set GITHUB_TOKEN or try again later"},
        )
    return HTTPException(
        status_code=502,
        detail={"code": "upstream_error", "message": str(e), "hint": "Try again later"},
    )


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Archai API is running", "version": __version__}


@app.get("/demo", response_model=GraphResponse)
async def demo():
    """Fixed example architecture."""
    return _graph_response(demo_graph())


@app.post("/analyze/manifest", response_model=GraphResponse)
async def analyze_manifest_endpoint(request: ManifestRequest):
    """Infer a graph from compose manifest text."""
    try:
        graph = analyze_manifest(request.text, request.file_name)
    except InputFormatError as e:
        raise _input_error(e)
    return _graph_response(graph)


@app.post("/analyze/paths", response_model=GraphResponse)
async def analyze_paths_endpoint(request: PathsRequest):
    """Infer a graph from an archive's file listing."""
    settings = Settings.from_env()
    graph = analyze_archive(
        request.paths,
        request.file_name,
        manifest_text=request.manifest_text,
        max_depth=settings.max_depth,
    )
    return _graph_response(graph)


@app.post("/analyze/github", response_model=RepositoryResponse)
def analyze_github_endpoint(request: GithubRequest):
    """Fetch a public GitHub repository and infer its graph."""
    settings = Settings.from_env()
    try:
        snapshot = fetch_repository(request.url, token=settings.github_token, timeout=settings.http_timeout_s)
    except ValueError as e:
        raise HTTPException(
            status_code=422,
            detail={"code": "invalid_url", "message": str(e), "hint": "Use https://github.com/owner/repo"},
        )
    except ExternalServiceError as e:
        raise _external_error(e)

    graph = analyze_repository(
        snapshot.entries,
        snapshot.name,
        default_branch=snapshot.default_branch,
        html_url=snapshot.html_url,
        max_depth=settings.max_depth,
    )
    logger.debug(f"Analyzed {snapshot.full_name}: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
    return RepositoryResponse(
        name=snapshot.name,
        html_url=snapshot.html_url,
        default_branch=snapshot.default_branch,
        description=snapshot.description,
        readme=snapshot.readme,
        graph=_graph_response(graph),
    )


@app.post("/insights", response_model=InsightsResponse)
def insights_endpoint(request: InsightsRequest):
    """Onboarding narrative for a graph; falls back to generic guidance on failure."""
    try:
        graph = ArchitectureGraph.from_dict(request.graph)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise HTTPException(
            status_code=422,
            detail={"code": "invalid_graph", "message": str(e), "hint": "Send the graph returned by /analyze"},
        )

    settings = Settings.from_env()
    text = generate_insights(
        graph,
        readme=request.readme,
        description=request.description,
        repo_name=request.repo_name or "",
        provider=request.provider or settings.insights_provider,
        model=settings.insights_model,
        timeout_s=settings.http_timeout_s,
    )
    return InsightsResponse(
        insights=text,
        sections=[{"title": t, "body": b} for t, b in split_sections(text)],
    )


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    import os
    run(port=int(os.getenv("PORT", 8080)))
