from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Union

from .errors import ArchaiError, ExternalServiceError, InputFormatError, ParseError
from .layout import (
    MAX_DEPTH,
    assemble_manifest_graph,
    assemble_tree_graph,
    demo_graph,
    strip_archive_suffix,
    trivial_graph,
)
from .manifest import parse_manifest
from .models import ArchitectureGraph, PathEntry
from .tree import build_tree

logger = logging.getLogger(__name__)

__all__ = [
    "ArchaiError",
    "ArchitectureGraph",
    "ExternalServiceError",
    "InputFormatError",
    "ParseError",
    "analyze_archive",
    "analyze_manifest",
    "analyze_paths",
    "analyze_repository",
    "demo_graph",
    "trivial_graph",
]


def analyze_manifest(text: str, file_name: str = "docker-compose.yml") -> ArchitectureGraph:
    """
    Build a graph from compose manifest text. Raises InputFormatError for
    text without a services mapping; a manifest declaring at most one
    service yields the trivial graph.
    """
    graph = assemble_manifest_graph(parse_manifest(text))
    if len(graph.nodes) <= 1:
        logger.debug(f"Manifest declares {len(graph.nodes)} service(s); using trivial graph")
        return trivial_graph(file_name)
    return graph


def analyze_paths(
    paths: Iterable[Union[str, PathEntry]],
    label: str,
    *,
    code_path: Optional[Callable[[str], str]] = None,
    max_depth: int = MAX_DEPTH,
) -> ArchitectureGraph:
    """Infer a graph from a flat file listing; no directories means a trivial graph."""
    tree = build_tree(paths)
    if not tree[""].subdirs:
        logger.debug(f"No directories detected for {label}; using trivial graph")
        return trivial_graph(label)
    return assemble_tree_graph(tree, label, code_path=code_path, max_depth=max_depth)


def analyze_archive(
    paths: List[str],
    file_name: str,
    manifest_text: Optional[str] = None,
    *,
    max_depth: int = MAX_DEPTH,
) -> ArchitectureGraph:
    """
    Analyze an uploaded archive listing. A manifest with two or more services
    wins; an invalid or single-service manifest falls back to the path tree.
    """
    label = strip_archive_suffix(file_name)
    if manifest_text:
        try:
            graph = assemble_manifest_graph(parse_manifest(manifest_text))
        except InputFormatError as e:
            logger.warning(f"Ignoring invalid manifest in {file_name}: {e}")
        else:
            if len(graph.nodes) > 1:
                return graph
            logger.debug(f"Single-service manifest in {file_name}; inferring from paths")
    return analyze_paths(paths, label, max_depth=max_depth)


def analyze_repository(
    entries: Iterable[Union[str, PathEntry]],
    repo_name: str,
    default_branch: str = "main",
    html_url: Optional[str] = None,
    *,
    max_depth: int = MAX_DEPTH,
) -> ArchitectureGraph:
    """Analyze a remote tree listing; code paths point at the repository browser."""
    code_path = None
    if html_url:
        base = html_url.rstrip("/")
        code_path = lambda p: f"{base}/tree/{default_branch}/{p}" if p else base
    return analyze_paths(entries, repo_name, code_path=code_path, max_depth=max_depth)
