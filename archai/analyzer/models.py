from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Semantic node types
SERVICE = "service"
DATABASE = "database"
API = "api"
LLM = "llm"
SEMANTIC_TYPES = (SERVICE, DATABASE, API, LLM)

# Edge stroke colors keyed by the target node's semantic type
TYPE_COLORS = {
    API: "hsl(142 76% 36%)",
    DATABASE: "hsl(267 84% 65%)",
    LLM: "hsl(24 95% 53%)",
}
DEFAULT_COLOR = "hsl(191 91% 55%)"


@dataclass(frozen=True)
class PathEntry:
    path: str
    type: str = "blob"  # "blob" for files, "tree" for directories

    @property
    def is_file(self) -> bool:
        return self.type != "tree"


@dataclass
class DirectoryNode:
    path: str
    files: List[str] = field(default_factory=list)
    subdirs: Dict[str, None] = field(default_factory=dict)  # ordered set of child paths

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def depth(self) -> int:
        return 0 if not self.path else self.path.count("/") + 1

    @property
    def parent_path(self) -> str:
        return self.path.rsplit("/", 1)[0] if "/" in self.path else ""

    @property
    def subdir_names(self) -> List[str]:
        return [p.rsplit("/", 1)[-1] for p in self.subdirs]

    def extension_histogram(self) -> Dict[str, int]:
        hist: Dict[str, int] = {}
        for f in self.files:
            base = f.rsplit("/", 1)[-1]
            if "." not in base:
                continue
            ext = base.rsplit(".", 1)[-1].lower()
            if ext:
                hist[ext] = hist.get(ext, 0) + 1
        return hist


@dataclass(frozen=True)
class ServiceDescriptor:
    name: str
    image: Optional[str] = None
    build: Optional[str] = None
    ports: List[str] = field(default_factory=list)
    depends_on: List[str] = field(default_factory=list)
    environment: List[str] = field(default_factory=list)


@dataclass
class Position:
    x: float
    y: float


@dataclass
class GraphNode:
    id: str
    label: str
    type: str
    description: str
    position: Position
    dependencies: List[str] = field(default_factory=list)
    code_path: Optional[str] = None
    connections: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "label": self.label,
            "description": self.description,
            "type": self.type,
            "connections": self.connections,
            "dependencies": list(self.dependencies),
        }
        if self.code_path is not None:
            data["codePath"] = self.code_path
        return {
            "id": self.id,
            "type": "custom",
            "position": {"x": self.position.x, "y": self.position.y},
            "data": data,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "GraphNode":
        data = raw.get("data") or {}
        pos = raw.get("position") or {}
        return cls(
            id=str(raw["id"]),
            label=data.get("label", ""),
            type=data.get("type", SERVICE),
            description=data.get("description", ""),
            position=Position(x=pos.get("x", 0), y=pos.get("y", 0)),
            dependencies=list(data.get("dependencies") or []),
            code_path=data.get("codePath"),
            connections=int(data.get("connections") or 0),
        )


@dataclass
class GraphEdge:
    id: str
    source: str
    target: str
    animated: bool = False
    stroke: str = DEFAULT_COLOR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "animated": self.animated,
            "style": {"stroke": self.stroke},
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "GraphEdge":
        style = raw.get("style") or {}
        return cls(
            id=str(raw["id"]),
            source=str(raw["source"]),
            target=str(raw["target"]),
            animated=bool(raw.get("animated", False)),
            stroke=style.get("stroke", DEFAULT_COLOR),
        )


@dataclass
class ArchitectureGraph:
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    def node(self, node_id: str) -> Optional[GraphNode]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def types_present(self) -> set[str]:
        return {n.type for n in self.nodes}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArchitectureGraph":
        return cls(
            nodes=[GraphNode.from_dict(n) for n in data.get("nodes", [])],
            edges=[GraphEdge.from_dict(e) for e in data.get("edges", [])],
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "ArchitectureGraph":
        return cls.from_dict(json.loads(text))
