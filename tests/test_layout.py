"""
Tests for graph assembly and the analysis pipeline entry points.
"""

import pytest

from archai.analyzer import (
    InputFormatError,
    analyze_archive,
    analyze_manifest,
    analyze_paths,
    analyze_repository,
    demo_graph,
)
from archai.analyzer.layout import TRIVIAL_DESCRIPTION, assemble_tree_graph, trivial_graph
from archai.analyzer.models import API, DATABASE, DEFAULT_COLOR, LLM, SERVICE, TYPE_COLORS
from archai.analyzer.tree import build_tree

EXAMPLE_MANIFEST = """
services:
  web:
    image: "x"
    depends_on: [db]
  db:
    image: "postgres"
"""


def _positions(graph):
    return {n.label: (n.position.x, n.position.y) for n in graph.nodes}


class TestTreeGraph:
    """Test breadth-first layout of directory trees."""

    def test_nodes_edges_and_positions(self):
        """Test one node per directory, parent edges and grid positions."""
        graph = analyze_paths(
            ["src/a.ts", "src/components/b.tsx", "server/index.js", "docs/readme.md"],
            "demo.zip",
        )
        labels = [n.label for n in graph.nodes]
        assert labels == ["demo.zip", "src", "server", "docs", "components"]
        assert [n.id for n in graph.nodes] == ["1", "2", "3", "4", "5"]
        assert len(graph.edges) == len(graph.nodes) - 1

        pos = _positions(graph)
        assert pos["demo.zip"] == (500, 50)
        assert pos["src"] == (100, 200)
        assert pos["server"] == (300, 200)
        assert pos["docs"] == (500, 200)
        assert pos["components"] == (100, 350)

    def test_edge_hints_follow_target_type(self):
        """Test only api targets animate and strokes follow the target's type."""
        graph = analyze_paths(["src/a.ts", "server/index.js", "db/schema.sql"], "proj")
        by_target = {graph.node(e.target).label: e for e in graph.edges}
        assert by_target["server"].animated is True
        assert by_target["server"].stroke == TYPE_COLORS[API]
        assert by_target["db"].animated is False
        assert by_target["db"].stroke == TYPE_COLORS[DATABASE]
        assert by_target["src"].stroke == DEFAULT_COLOR
        assert by_target["server"].id == f"e1-{by_target['server'].target}"

    def test_vendor_named_directories(self):
        """Test names embedding db or ai take the database and llm types."""
        graph = analyze_paths(["mongodb/init.js", "openai/client.py"], "p")
        types = {n.label: n.type for n in graph.nodes}
        assert types["mongodb"] == DATABASE
        assert types["openai"] == LLM

    def test_dependencies_and_connections(self):
        """Test dependencies list subdirectories and connections count out-edges."""
        graph = analyze_paths(["src/a.ts", "src/components/b.tsx", "server/index.js"], "proj")
        root = graph.node("1")
        assert root.dependencies == ["src", "server"]
        assert root.connections == 2
        src = next(n for n in graph.nodes if n.label == "src")
        assert src.dependencies == ["components"]
        assert src.connections == 1
        assert src.code_path == "./src"
        assert root.code_path == "./"

    def test_depth_cutoff(self):
        """Test directories deeper than three levels are never created."""
        graph = analyze_paths(["a/b/c/d/e/f.txt"], "deep")
        assert [n.label for n in graph.nodes] == ["deep", "a", "b", "c"]
        assert len(graph.edges) == 3

    def test_custom_depth(self):
        """Test the depth limit is configurable."""
        tree = build_tree(["a/b/c/d/e/f.txt"])
        graph = assemble_tree_graph(tree, "deep", max_depth=1)
        assert [n.label for n in graph.nodes] == ["deep", "a"]

    def test_row_packing(self):
        """Test rows of four and the vertical offset between depth levels."""
        paths = [f"d{i}/f.txt" for i in range(6)] + ["d0/x/f.txt"]
        pos = _positions(analyze_paths(paths, "grid"))
        assert pos["d0"] == (100, 200)
        assert pos["d3"] == (700, 200)
        assert pos["d4"] == (100, 350)
        assert pos["d5"] == (300, 350)
        assert pos["x"] == (100, 500)

    @pytest.mark.parametrize("paths", [
        ["a/1", "b/2", "c/d/3"],
        ["x/y/z/w/v/u/1", "x/y/2", "x/q/3", "r/4"],
        ["one/two/three/four.txt", "one/alpha/beta/gamma.txt", "top.txt"],
    ])
    def test_edges_equal_nodes_minus_one(self, paths):
        """Test every visited non-root directory has exactly one edge."""
        graph = analyze_paths(paths, "p")
        assert len(graph.edges) == len(graph.nodes) - 1
        targets = [e.target for e in graph.edges]
        assert len(targets) == len(set(targets))


class TestTrivialGraph:
    """Test the single-node fallback."""

    def test_empty_listing(self):
        """Test an empty listing yields one node and no edges."""
        graph = analyze_paths([], "upload.zip")
        assert len(graph.nodes) == 1
        assert graph.edges == []
        node = graph.nodes[0]
        assert node.id == "1"
        assert node.label == "upload"
        assert node.type == SERVICE
        assert node.description == TRIVIAL_DESCRIPTION
        assert (node.position.x, node.position.y) == (250, 0)

    def test_files_without_directories(self):
        """Test a flat listing without directories is trivial."""
        graph = analyze_paths(["README.md", "main.py"], "flat.zip")
        assert len(graph.nodes) == 1
        assert graph.nodes[0].label == "flat"

    def test_trivial_graph_label(self):
        """Test labels keep non-zip names intact."""
        assert trivial_graph("service.tar").nodes[0].label == "service.tar"


class TestManifestGraph:
    """Test manifest-derived graphs."""

    def test_example_manifest(self):
        """Test the two-service example."""
        graph = analyze_manifest(EXAMPLE_MANIFEST)
        assert [(n.id, n.label, n.type) for n in graph.nodes] == [
            ("service-0", "web", SERVICE),
            ("service-1", "db", DATABASE),
        ]
        assert len(graph.edges) == 1
        edge = graph.edges[0]
        assert (edge.id, edge.source, edge.target) == ("e-0-1", "service-0", "service-1")
        assert edge.animated is False
        assert edge.stroke == TYPE_COLORS[DATABASE]
        assert graph.nodes[0].connections == 1
        assert graph.nodes[1].connections == 0
        assert _positions(graph) == {"web": (100, 100), "db": (400, 100)}

    def test_unresolved_dependency(self):
        """Test undeclared dependencies are kept but produce no edge."""
        graph = analyze_manifest(
            "services:\n  web:\n    depends_on: [db, cache]\n  db:\n    image: postgres\n"
        )
        assert graph.nodes[0].dependencies == ["db", "cache"]
        assert len(graph.edges) == 1

    def test_grid_wraps(self):
        """Test a five-service manifest uses a three-column grid."""
        text = "services:\n" + "".join(f"  s{i}:\n    image: x\n" for i in range(5))
        pos = _positions(analyze_manifest(text))
        assert pos["s2"] == (700, 100)
        assert pos["s3"] == (100, 300)

    def test_single_service_is_trivial(self):
        """Test a one-service manifest yields the trivial graph."""
        graph = analyze_manifest("services:\n  web:\n    image: nginx\n", "stack.yml")
        assert len(graph.nodes) == 1
        assert graph.nodes[0].label == "stack.yml"

    def test_invalid_manifest_raises(self):
        """Test manifests without services raise."""
        with pytest.raises(InputFormatError):
            analyze_manifest("version: '3'\n")


class TestRouting:
    """Test archive and repository routing."""

    def test_archive_prefers_manifest(self):
        """Test a multi-service manifest wins over the path tree."""
        graph = analyze_archive(["src/a.py", "docker-compose.yml"], "app.zip", EXAMPLE_MANIFEST)
        assert [n.label for n in graph.nodes] == ["web", "db"]

    def test_archive_invalid_manifest_falls_through(self, caplog):
        """Test an invalid manifest falls back to path analysis with a warning."""
        with caplog.at_level("WARNING", logger="archai.analyzer"):
            graph = analyze_archive(["src/a.py", "docker-compose.yml"], "app.zip", "services: [a, b]")
        assert "Ignoring invalid manifest in app.zip" in caplog.text
        assert [n.label for n in graph.nodes] == ["app", "src"]

    def test_archive_without_manifest(self):
        """Test archives without a manifest use the tree."""
        graph = analyze_archive(["api/main.py", "web/index.js"], "shop.zip")
        assert graph.nodes[0].label == "shop"
        assert {n.label for n in graph.nodes} == {"shop", "api", "web"}

    def test_repository_code_paths(self):
        """Test code paths point at the repository browser."""
        graph = analyze_repository(
            ["src/a.py", "src/lib/b.py"],
            "proj",
            default_branch="develop",
            html_url="https://github.com/o/proj",
        )
        root = graph.node("1")
        assert root.label == "proj"
        assert root.code_path == "https://github.com/o/proj"
        lib = next(n for n in graph.nodes if n.label == "lib")
        assert lib.code_path == "https://github.com/o/proj/tree/develop/src/lib"


class TestDemoGraph:
    """Test the built-in example."""

    def test_demo_shape(self):
        """Test the demo graph's nodes and edges."""
        graph = demo_graph()
        assert len(graph.nodes) == 6
        assert len(graph.edges) == 6
        assert graph.node("4").type == LLM
        edge = next(e for e in graph.edges if e.target == "4")
        assert edge.stroke == TYPE_COLORS[LLM]
        assert graph.node("3").connections == 3
