"""
Tests for rebuilding directory hierarchies from flat listings.
"""

from archai.analyzer.models import PathEntry
from archai.analyzer.tree import build_tree, filter_ignored, siblings


def _assert_consistent(tree):
    """Every directory's subdir set is exactly the set of paths whose parent it is."""
    for path, node in tree.items():
        expected = {p for p, n in tree.items() if p and n.parent_path == path}
        assert set(node.subdirs) == expected
        if path:
            assert node.parent_path in tree


class TestBuildTree:
    """Test path-tree construction."""

    def test_basic_hierarchy(self):
        """Test files land in their directory and ancestors are linked."""
        tree = build_tree(["src/a.ts", "src/components/Button.tsx", "README.md"])
        assert list(tree[""].subdirs) == ["src"]
        assert tree[""].files == ["README.md"]
        assert tree["src"].files == ["src/a.ts"]
        assert list(tree["src"].subdirs) == ["src/components"]
        assert tree["src/components"].files == ["src/components/Button.tsx"]
        _assert_consistent(tree)

    def test_no_orphans_or_missing_ancestors(self):
        """Test deep paths create every intermediate directory."""
        paths = [
            "a/b/c/d.txt",
            "a/x.txt",
            "e/f/g/h/i.py",
            "e/f/j.py",
            "k.md",
        ]
        tree = build_tree(paths)
        for p in ["", "a", "a/b", "a/b/c", "e", "e/f", "e/f/g", "e/f/g/h"]:
            assert p in tree
        _assert_consistent(tree)

    def test_empty_listing(self):
        """Test an empty listing yields only the root."""
        tree = build_tree([])
        assert list(tree) == [""]
        assert tree[""].files == []

    def test_directory_entries_skipped(self):
        """Test remote tree entries of type tree add nothing by themselves."""
        tree = build_tree([PathEntry("src", "tree"), PathEntry("docs/guide.md", "blob")])
        assert "src" not in tree
        assert "docs" in tree

    def test_duplicates_counted_once(self):
        """Test repeated paths are listed once."""
        tree = build_tree(["src/a.py", "src/a.py", "./src//a.py"])
        assert tree["src"].files == ["src/a.py"]

    def test_depth_and_names(self):
        """Test node depth and name properties."""
        tree = build_tree(["pkg/sub/mod.py"])
        assert tree[""].depth == 0
        assert tree["pkg"].depth == 1
        assert tree["pkg/sub"].depth == 2
        assert tree["pkg/sub"].name == "sub"
        assert tree["pkg/sub"].parent_path == "pkg"

    def test_extension_histogram(self):
        """Test extension counts ignore files without extensions."""
        tree = build_tree(["src/a.ts", "src/b.TS", "src/c.css", "src/Makefile"])
        assert tree["src"].extension_histogram() == {"ts": 2, "css": 1}


class TestHelpers:
    """Test listing helpers."""

    def test_filter_ignored(self):
        """Test vendored and build directories are dropped."""
        paths = ["src/a.js", "node_modules/x/index.js", "web/.next/cache.json", "node_modules.txt"]
        assert filter_ignored(paths) == ["src/a.js", "node_modules.txt"]

    def test_siblings(self):
        """Test sibling names include the directory itself."""
        tree = build_tree(["app/client/a.js", "app/server/b.js", "lib/c.js"])
        assert siblings(tree, "app/client") == ["client", "server"]
        assert siblings(tree, "lib") == ["app", "lib"]
        assert siblings(tree, "") == []
