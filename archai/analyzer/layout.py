from __future__ import annotations

import logging
import math
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Sequence, Tuple

from .classify import classify_node
from .manifest import classify_service, describe_service
from .models import (
    API,
    DATABASE,
    DEFAULT_COLOR,
    LLM,
    SERVICE,
    TYPE_COLORS,
    ArchitectureGraph,
    GraphEdge,
    GraphNode,
    Position,
    ServiceDescriptor,
)
from .tree import DirectoryTree

logger = logging.getLogger(__name__)

MAX_DEPTH = 3

# Directory-tree layout
NODES_PER_ROW = 4
ROOT_POSITION = (500, 50)
FIRST_LEVEL_Y = 200
COLUMN_WIDTH = 200
ROW_HEIGHT = 150
LEFT_MARGIN = 100

# Manifest grid layout
GRID_COLUMN_WIDTH = 300
GRID_ROW_HEIGHT = 200
GRID_MARGIN = 100

TRIVIAL_DESCRIPTION = "Main application codebase uploaded for analysis."


def make_edge(source: GraphNode, target: GraphNode, edge_id: Optional[str] = None) -> GraphEdge:
    """Edge hints come from the target node's semantic type."""
    return GraphEdge(
        id=edge_id or f"e{source.id}-{target.id}",
        source=source.id,
        target=target.id,
        animated=target.type == API,
        stroke=TYPE_COLORS.get(target.type, DEFAULT_COLOR),
    )


def count_connections(graph: ArchitectureGraph) -> ArchitectureGraph:
    """Set every node's connection count to its out-degree."""
    out: Dict[str, int] = {}
    for e in graph.edges:
        out[e.source] = out.get(e.source, 0) + 1
    for n in graph.nodes:
        n.connections = out.get(n.id, 0)
    return graph


def strip_archive_suffix(label: str) -> str:
    return label[:-4] if label.lower().endswith(".zip") else label


def trivial_graph(label: str) -> ArchitectureGraph:
    """Single-node graph used whenever no structure could be inferred."""
    node = GraphNode(
        id="1",
        label=strip_archive_suffix(label) or "Application",
        type=SERVICE,
        description=TRIVIAL_DESCRIPTION,
        position=Position(x=250, y=0),
        dependencies=[],
    )
    return ArchitectureGraph(nodes=[node], edges=[])


def assemble_tree_graph(
    tree: DirectoryTree,
    label: str,
    *,
    code_path: Optional[Callable[[str], str]] = None,
    max_depth: int = MAX_DEPTH,
) -> ArchitectureGraph:
    """
    Lay out a classified directory tree as a graph.

    The root becomes node "1"; its subdirectories are visited breadth-first.
    Entries deeper than max_depth are dropped when dequeued, so nothing below
    the limit is created or explored. Nodes are packed in rows of
    NODES_PER_ROW per depth level, and each new level starts below the
    tallest block of rows of the previous one.
    """
    if code_path is None:
        code_path = lambda p: f"./{p}"

    root = tree.get("")
    if root is None:
        return trivial_graph(label)

    root_cls = classify_node(tree, root)
    root_node = GraphNode(
        id="1",
        label=label or "Root",
        type=root_cls.type,
        description=root_cls.description,
        position=Position(*ROOT_POSITION),
        dependencies=root.subdir_names,
        code_path=code_path(""),
    )
    nodes: List[GraphNode] = [root_node]
    edges: List[GraphEdge] = []
    next_id = 2

    queue: Deque[Tuple[str, GraphNode, int]] = deque((p, root_node, 1) for p in root.subdirs)
    processed: set[str] = set()
    per_depth: Dict[int, int] = {}
    cumulative_y = FIRST_LEVEL_Y
    current_depth = 0
    max_row = 0

    while queue:
        path, parent, depth = queue.popleft()
        if path in processed or depth > max_depth:
            continue
        processed.add(path)

        info = tree.get(path)
        if info is None:
            continue

        if depth != current_depth:
            if current_depth > 0:
                cumulative_y += (max_row + 1) * ROW_HEIGHT
            current_depth = depth
            max_row = 0

        placed = per_depth.get(depth, 0)
        col = placed % NODES_PER_ROW
        row = placed // NODES_PER_ROW
        max_row = max(max_row, row)
        per_depth[depth] = placed + 1

        cls = classify_node(tree, info)
        node = GraphNode(
            id=str(next_id),
            label=info.name,
            type=cls.type,
            description=cls.description,
            position=Position(x=LEFT_MARGIN + col * COLUMN_WIDTH, y=cumulative_y + row * ROW_HEIGHT),
            dependencies=info.subdir_names,
            code_path=code_path(path),
        )
        next_id += 1
        nodes.append(node)
        edges.append(make_edge(parent, node))

        for sub in info.subdirs:
            queue.append((sub, node, depth + 1))

    logger.debug(f"Tree graph: {len(nodes)} nodes, {len(edges)} edges (max depth {max_depth})")
    return count_connections(ArchitectureGraph(nodes=nodes, edges=edges))


def assemble_manifest_graph(services: Sequence[ServiceDescriptor]) -> ArchitectureGraph:
    """Grid-pack manifest services row-major; edges follow declared dependencies."""
    if not services:
        return ArchitectureGraph()

    cols = math.ceil(math.sqrt(len(services)))
    index_of = {svc.name: i for i, svc in enumerate(services)}
    nodes: List[GraphNode] = []
    for i, svc in enumerate(services):
        row, col = divmod(i, cols)
        nodes.append(
            GraphNode(
                id=f"service-{i}",
                label=svc.name,
                type=classify_service(svc.name),
                description=describe_service(svc),
                position=Position(x=col * GRID_COLUMN_WIDTH + GRID_MARGIN, y=row * GRID_ROW_HEIGHT + GRID_MARGIN),
                dependencies=list(svc.depends_on),
                code_path=f"./{svc.build}" if svc.build else None,
            )
        )

    edges: List[GraphEdge] = []
    for i, svc in enumerate(services):
        for dep in svc.depends_on:
            j = index_of.get(dep)
            if j is None:
                # External or undeclared dependency
                continue
            edges.append(make_edge(nodes[i], nodes[j], edge_id=f"e-{i}-{j}"))

    logger.debug(f"Manifest graph: {len(nodes)} nodes, {len(edges)} edges")
    return count_connections(ArchitectureGraph(nodes=nodes, edges=edges))


def demo_graph() -> ArchitectureGraph:
    """Fixed example architecture for demos."""
    rows = [
        ("1", "API Gateway", SERVICE, (250, 0),
         "Main entry point handling authentication, rate limiting, and routing requests to microservices.",
         ["Auth Service", "User Service"], "./services/api-gateway"),
        ("2", "Auth Service", SERVICE, (100, 150),
         "Manages user authentication and authorization using OAuth2 and JWT tokens.",
         ["PostgreSQL"], "./services/auth"),
        ("3", "User Service", SERVICE, (400, 150),
         "CRUD operations for user profiles, preferences, and account settings.",
         ["PostgreSQL", "Redis Cache"], "./services/users"),
        ("4", "AI Processor", LLM, (250, 300),
         "LLM-powered service for natural language understanding and content generation.",
         ["OpenAI API", "Vector DB"], "./services/ai-processor"),
        ("5", "PostgreSQL", DATABASE, (100, 450),
         "Primary relational database storing user data and application state.",
         [], "./infrastructure/postgres"),
        ("6", "Redis Cache", DATABASE, (400, 450),
         "In-memory data store for caching and session management.",
         [], "./infrastructure/redis"),
    ]
    nodes = {
        node_id: GraphNode(
            id=node_id, label=label, type=node_type, description=desc,
            position=Position(*pos), dependencies=deps, code_path=path,
        )
        for node_id, label, node_type, pos, desc, deps, path in rows
    }
    links = [("1", "2"), ("1", "3"), ("2", "5"), ("3", "5"), ("3", "6"), ("3", "4")]
    edges = [make_edge(nodes[s], nodes[t]) for s, t in links]
    return count_connections(ArchitectureGraph(nodes=list(nodes.values()), edges=edges))
