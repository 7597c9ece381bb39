from __future__ import annotations

from typing import Dict, Iterable, List, Union

from .models import DirectoryNode, PathEntry

DirectoryTree = Dict[str, DirectoryNode]

IGNORE_DIRS = {
    ".git",
    "node_modules",
    ".venv",
    "venv",
    "__pycache__",
    ".mypy_cache",
    ".next",
    "build",
    "dist",
}


def _ensure(tree: DirectoryTree, path: str) -> DirectoryNode:
    node = tree.get(path)
    if node is None:
        node = DirectoryNode(path=path)
        tree[path] = node
    return node


def _normalize(path: str) -> str:
    return "/".join(part for part in path.strip().split("/") if part and part != ".")


def build_tree(entries: Iterable[Union[str, PathEntry]]) -> DirectoryTree:
    """
    Rebuild the directory hierarchy from a flat listing.

    Directory entries ("tree") are skipped; every ancestor of a file is
    created eagerly, so each non-root path has its parent in the mapping.
    Repeated paths are counted once.
    """
    tree: DirectoryTree = {"": DirectoryNode(path="")}
    seen: set[str] = set()

    for entry in entries:
        if isinstance(entry, PathEntry):
            if not entry.is_file:
                continue
            raw = entry.path
        else:
            raw = entry
        path = _normalize(raw)
        if not path or path in seen:
            continue
        seen.add(path)

        parts = path.split("/")
        for i in range(len(parts)):
            current = "/".join(parts[: i + 1])
            parent = "/".join(parts[:i])
            if i == len(parts) - 1:
                _ensure(tree, parent).files.append(path)
            else:
                _ensure(tree, current)
                _ensure(tree, parent).subdirs[current] = None

    return tree


def filter_ignored(paths: Iterable[str]) -> List[str]:
    return [p for p in paths if not any(part in IGNORE_DIRS for part in p.split("/")[:-1])]


def siblings(tree: DirectoryTree, path: str) -> List[str]:
    """Names of the directories sharing this directory's parent, itself included."""
    node = tree.get(path)
    if node is None or not path:
        return []
    parent = tree.get(node.parent_path)
    if parent is None:
        return [node.name]
    return parent.subdir_names
