"""
Tests for directory classification.
"""

from archai.analyzer.classify import (
    ROOT_DESCRIPTION,
    classify_directory,
    classify_tree,
    classify_type,
    subdir_clause,
    tech_clause,
)
from archai.analyzer.models import API, DATABASE, LLM, SERVICE
from archai.analyzer.tree import build_tree


def _classify(name, **kwargs):
    params = dict(
        file_count=2,
        extensions=[],
        subdir_names=[],
        sibling_names=[name],
        parent_name="root",
        depth=1,
    )
    params.update(kwargs)
    return classify_directory(name, **params)


class TestTypeRules:
    """Test semantic type selection."""

    def test_api_names(self):
        """Test api-like directory names."""
        for name in ["api", "server", "backend", "functions", "edge-function"]:
            assert classify_type(name) == API

    def test_database_names(self):
        """Test database-like directory names."""
        for name in ["db", "database", "supabase", "firebase", "mongodb", "userdb", "dbconfig"]:
            assert classify_type(name) == DATABASE

    def test_llm_names(self):
        """Test llm-like directory names."""
        for name in ["llm", "ai", "ml", "ai-agents", "openai", "genai", "mlops"]:
            assert classify_type(name) == LLM

    def test_type_rules_match_substrings(self):
        """Test type patterns match anywhere in the name, first rule wins."""
        assert classify_type("html") == LLM
        assert classify_type("api-db") == API
        assert classify_type("MongoDB") == DATABASE

    def test_default_service(self):
        """Test unmatched names default to service."""
        for name in ["components", "utils", "widgets"]:
            assert classify_type(name) == SERVICE


class TestDescriptions:
    """Test description tables and enrichment clauses."""

    def test_root(self):
        """Test the root gets its own description."""
        result = _classify("", depth=0)
        assert result.type == SERVICE
        assert result.description == ROOT_DESCRIPTION

    def test_source_directory(self):
        """Test the source rule and its subdirectory fragment."""
        result = _classify("src", file_count=2, extensions=["ts"], subdir_names=["components"])
        assert result.description.startswith("The main source code directory")
        assert ", organized into 1 subdirectories" in result.description
        assert " Built with TypeScript for type safety." in result.description

    def test_first_rule_wins(self):
        """Test earlier rows shadow later ones."""
        assert _classify("services").description.startswith("Service layer containing 2 business logic modules.")
        assert _classify("api").description.startswith("Backend API layer with 2 files")

    def test_generic_fallback(self):
        """Test unmatched names use the generic template."""
        small = _classify("widgets", file_count=2)
        assert small.description.startswith(
            "Module organizing 2 widgets-related files for the project. Small, focused module"
        )
        large = _classify("widgets", file_count=8, subdir_names=["a"])
        assert "across 1 subdirectories" in large.description
        assert "Larger module with multiple files" in large.description
        empty = _classify("widgets", file_count=0)
        assert "Contains core functionality" in empty.description

    def test_size_clauses(self):
        """Test large and compact module clauses."""
        assert "Large module with 25 files" in _classify("widgets", file_count=25).description
        compact = _classify("widgets", file_count=3)
        assert "Compact module - good entry point for understanding widgets functionality." in compact.description
        with_subdirs = _classify("widgets", file_count=3, subdir_names=["x"])
        assert "Compact module" not in with_subdirs.description

    def test_tech_clause(self):
        """Test extension-driven clauses."""
        assert tech_clause(["ts", "js"], 3) == " Built with TypeScript for type safety."
        assert tech_clause(["js"], 3) == " Written in JavaScript."
        assert tech_clause(["css", "json"], 3) == " Includes styling definitions. Primarily configuration files."
        assert tech_clause(["json"], 12) == ""
        assert tech_clause(["sql", "md"], 2) == " Contains database schemas and migrations. Includes documentation."

    def test_subdir_clause(self):
        """Test critical subdirectories are capped at three."""
        assert subdir_clause(["api", "auth", "config", "core"]) == "\n\nCritical subdirectories: api, auth, config."
        assert subdir_clause(["tests", "utils", "types"]) == (
            " Includes test coverage. Provides utility functions. Defines TypeScript types."
        )
        assert subdir_clause([]) == ""

    def test_client_role_requires_server_sibling(self):
        """Test the client-side clause needs a complementary sibling."""
        paired = _classify("client", depth=2, parent_name="app", sibling_names=["client", "server"])
        assert paired.context == (
            "\n\nPart of app module. Handles client-side logic (runs in browser with limited permissions)."
        )
        alone = _classify("client", depth=2, parent_name="app", sibling_names=["client"])
        assert alone.context == "\n\nPart of app module."

    def test_server_role_and_shared(self):
        """Test server-side and shared role clauses."""
        server = _classify("backend", depth=2, parent_name="app", sibling_names=["frontend", "backend"])
        assert "Handles server-side logic" in server.context
        shared = _classify("shared", depth=3, parent_name="packages")
        assert "Shared code used by multiple modules." in shared.context

    def test_no_role_at_top_level(self):
        """Test depth-1 directories get no parent clause."""
        assert "Part of" not in _classify("client", sibling_names=["client", "server"]).description


class TestIdempotence:
    """Test classification is deterministic."""

    def test_repeat_classification_identical(self):
        """Test re-running classification yields identical descriptions."""
        tree = build_tree([
            "src/components/Button.tsx",
            "src/api/routes.ts",
            "app/client/index.js",
            "app/server/index.js",
            "db/migrations/001.sql",
        ])
        first = classify_tree(tree)
        second = classify_tree(tree)
        assert first == second
        assert {p: c.description for p, c in first.items()} == {p: c.description for p, c in second.items()}
