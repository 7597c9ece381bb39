"""
Tests for settings and report emission.
"""

import json

from archai.analyzer import demo_graph
from archai.analyzer.report import emit_report
from archai.config import Settings

ENV_VARS = [
    "ARCHAI_INSIGHTS_PROVIDER",
    "ARCHAI_INSIGHTS_MODEL",
    "GITHUB_TOKEN",
    "ARCHAI_HTTP_TIMEOUT",
    "ARCHAI_MAX_DEPTH",
    "ARCHAI_LOG_LEVEL",
]


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Test defaults with a clean environment."""
        for name in ENV_VARS:
            monkeypatch.delenv(name, raising=False)
        s = Settings.from_env()
        assert s.insights_provider == "heuristic"
        assert s.insights_model is None
        assert s.github_token is None
        assert s.http_timeout_s == 15.0
        assert s.max_depth == 3
        assert s.log_level == "WARNING"

    def test_overrides(self, monkeypatch):
        """Test values read from the environment."""
        monkeypatch.setenv("ARCHAI_INSIGHTS_PROVIDER", "openai")
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_x")
        monkeypatch.setenv("ARCHAI_HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("ARCHAI_MAX_DEPTH", "5")
        monkeypatch.setenv("ARCHAI_LOG_LEVEL", "debug")
        s = Settings.from_env()
        assert s.insights_provider == "openai"
        assert s.github_token == "ghp_x"
        assert s.http_timeout_s == 2.5
        assert s.max_depth == 5
        assert s.log_level == "DEBUG"

    def test_invalid_numbers_fall_back(self, monkeypatch, caplog):
        """Test invalid numbers use defaults and log a warning."""
        monkeypatch.setenv("ARCHAI_HTTP_TIMEOUT", "soon")
        monkeypatch.setenv("ARCHAI_MAX_DEPTH", "-1")
        with caplog.at_level("WARNING", logger="archai.config"):
            s = Settings.from_env()
        assert s.http_timeout_s == 15.0
        assert s.max_depth == 3
        assert "ARCHAI_HTTP_TIMEOUT" in caplog.text
        assert "ARCHAI_MAX_DEPTH" in caplog.text


class TestReport:
    """Test report emission."""

    def test_graph_only(self, tmp_path):
        """Test only graph.json is written without insights."""
        dest = emit_report(demo_graph(), str(tmp_path / "out"))
        assert json.loads((dest / "graph.json").read_text())["nodes"][0]["id"] == "1"
        assert not (dest / "insights.md").exists()

    def test_with_insights(self, tmp_path):
        """Test insights.md carries a component summary and the narrative."""
        dest = emit_report(demo_graph(), str(tmp_path), insights="**Overview**:\nHello")
        text = (dest / "insights.md").read_text()
        assert "Components: 6" in text
        assert "- PostgreSQL (database)" in text
        assert text.rstrip().endswith("Hello")
