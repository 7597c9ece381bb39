from __future__ import annotations

from pathlib import Path
from typing import Optional

from .models import ArchitectureGraph


def emit_report(graph: ArchitectureGraph, dest_path: str, insights: Optional[str] = None) -> Path:
    dest = Path(dest_path)
    dest.mkdir(parents=True, exist_ok=True)
    # Graph JSON
    with open(dest / "graph.json", "w") as f:
        f.write(graph.to_json(indent=2))
    # Human summary
    if insights is not None:
        lines = []
        lines.append("# Architecture Insights")
        lines.append("")
        lines.append(f"Components: {len(graph.nodes)}")
        lines.append(f"Connections: {len(graph.edges)}")
        lines.append("")
        lines.append("Components:")
        for node in graph.nodes:
            lines.append(f"- {node.label} ({node.type})")
        lines.append("")
        lines.append(insights)
        with open(dest / "insights.md", "w") as f:
            f.write("\n".join(lines) + "\n")
    return dest
