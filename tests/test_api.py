"""
Tests for the HTTP API.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from archai.analyzer import demo_graph
from archai.analyzer.errors import ExternalServiceError
from archai.analyzer.fetcher import RepositorySnapshot
from archai.analyzer.models import PathEntry
from archai.api.app import app
from archai.narrative import FALLBACK_INSIGHTS, SECTION_TITLES


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("ARCHAI_INSIGHTS_PROVIDER", raising=False)
    monkeypatch.delenv("ARCHAI_MAX_DEPTH", raising=False)
    return TestClient(app)


class TestAnalyzeEndpoints:
    """Test graph endpoints."""

    def test_root(self, client):
        """Test health check."""
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["message"] == "Archai API is running"

    def test_demo(self, client):
        """Test the demo graph endpoint."""
        data = client.get("/demo").json()
        assert len(data["nodes"]) == 6
        assert len(data["edges"]) == 6

    def test_manifest(self, client):
        """Test manifest analysis."""
        text = 'services:\n  web:\n    image: "x"\n    depends_on: [db]\n  db:\n    image: "postgres"\n'
        resp = client.post("/analyze/manifest", json={"text": text, "file_name": "docker-compose.yml"})
        assert resp.status_code == 200
        data = resp.json()
        assert [n["data"]["type"] for n in data["nodes"]] == ["service", "database"]
        assert [(e["source"], e["target"]) for e in data["edges"]] == [("service-0", "service-1")]

    def test_invalid_manifest(self, client):
        """Test invalid manifests map to 422 with an error body."""
        resp = client.post("/analyze/manifest", json={"text": "version: '3'"})
        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail["code"] == "invalid_manifest"
        assert set(detail) == {"code", "message", "hint"}

    def test_paths(self, client):
        """Test path-listing analysis."""
        resp = client.post("/analyze/paths", json={"paths": ["src/a.ts", "api/b.ts"], "file_name": "app.zip"})
        data = resp.json()
        assert [n["data"]["label"] for n in data["nodes"]] == ["app", "src", "api"]
        assert len(data["edges"]) == 2

    def test_paths_empty(self, client):
        """Test an empty listing returns the trivial graph."""
        data = client.post("/analyze/paths", json={"paths": [], "file_name": "empty.zip"}).json()
        assert len(data["nodes"]) == 1
        assert data["edges"] == []


class TestGithubEndpoint:
    """Test remote repository analysis with the fetcher mocked."""

    @patch("archai.api.app.fetch_repository")
    def test_success(self, mock_fetch, client):
        """Test the graph, README and description are returned."""
        mock_fetch.return_value = RepositorySnapshot(
            owner="acme",
            name="codesight",
            html_url="https://github.com/acme/codesight",
            default_branch="main",
            entries=[PathEntry("src/app.ts"), PathEntry("supabase/config.toml")],
            readme="# CodeSight",
            description="Architecture explorer",
        )
        resp = client.post("/analyze/github", json={"url": "https://github.com/acme/codesight"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["readme"] == "# CodeSight"
        assert data["description"] == "Architecture explorer"
        nodes = data["graph"]["nodes"]
        assert nodes[0]["data"]["label"] == "codesight"
        assert nodes[1]["data"]["codePath"] == "https://github.com/acme/codesight/tree/main/src"

    @patch("archai.api.app.fetch_repository")
    def test_not_found(self, mock_fetch, client):
        """Test a missing repository maps to 404."""
        mock_fetch.side_effect = ExternalServiceError("Repository not found.", status_code=404)
        resp = client.post("/analyze/github", json={"url": "https://github.com/acme/missing"})
        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "repository_not_found"

    @patch("archai.api.app.fetch_repository")
    def test_rate_limited(self, mock_fetch, client):
        """Test rate limiting maps to 429."""
        mock_fetch.side_effect = ExternalServiceError("rate limit", status_code=429)
        assert client.post("/analyze/github", json={"url": "github.com/a/b"}).status_code == 429

    @patch("archai.api.app.fetch_repository")
    def test_upstream_failure(self, mock_fetch, client):
        """Test other host failures map to 502."""
        mock_fetch.side_effect = ExternalServiceError("offline")
        assert client.post("/analyze/github", json={"url": "github.com/a/b"}).status_code == 502

    def test_invalid_url(self, client):
        """Test malformed URLs map to 422."""
        resp = client.post("/analyze/github", json={"url": "not a url"})
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "invalid_url"


class TestInsightsEndpoint:
    """Test narrative generation over HTTP."""

    def test_heuristic(self, client):
        """Test the narrative and its sections are returned."""
        resp = client.post("/insights", json={"graph": demo_graph().to_dict()})
        assert resp.status_code == 200
        data = resp.json()
        assert [s["title"] for s in data["sections"]] == SECTION_TITLES
        assert data["insights"].startswith("**Overview**:")

    def test_remote_failure_falls_back(self, client, monkeypatch):
        """Test provider failures return the generic text."""
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        resp = client.post("/insights", json={"graph": demo_graph().to_dict(), "provider": "anthropic"})
        assert resp.status_code == 200
        assert resp.json()["insights"] == FALLBACK_INSIGHTS

    @patch("archai.api.app.generate_insights", return_value="**Overview**:\nok")
    def test_configured_timeout_reaches_provider(self, mock_generate, client, monkeypatch):
        """Test ARCHAI_HTTP_TIMEOUT bounds insight generation."""
        monkeypatch.setenv("ARCHAI_HTTP_TIMEOUT", "7.5")
        resp = client.post("/insights", json={"graph": demo_graph().to_dict()})
        assert resp.status_code == 200
        assert mock_generate.call_args.kwargs["timeout_s"] == 7.5

    def test_invalid_graph(self, client):
        """Test graphs without node ids are rejected."""
        resp = client.post("/insights", json={"graph": {"nodes": [{"data": {}}], "edges": []}})
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "invalid_graph"
