from dataclasses import dataclass, field
from typing import List, Optional

from ..analyzer.models import API, DATABASE, LLM, SERVICE, ArchitectureGraph
from .components import (
    ComponentView,
    DuplicateGroup,
    components_from_graph,
    duplicate_groups,
    relationships,
)
from .domain import GraphTraits, ProjectDomain, infer_domain
from .readme import ReadmeContext, extract_readme_context


@dataclass
class NarrativeContext:
    """Derived view of one graph, rebuilt on every narrative request."""
    repo_name: str
    components: List[ComponentView]
    readme: ReadmeContext
    domain: ProjectDomain
    traits: GraphTraits
    duplicates: List[DuplicateGroup] = field(default_factory=list)
    relationships: List[str] = field(default_factory=list)
    edge_count: int = 0

    def of_type(self, node_type: str) -> List[ComponentView]:
        return [c for c in self.components if c.type == node_type]

    def first_of_type(self, node_type: str) -> Optional[ComponentView]:
        found = self.of_type(node_type)
        return found[0] if found else None

    @property
    def apis(self) -> List[ComponentView]:
        return self.of_type(API)

    @property
    def databases(self) -> List[ComponentView]:
        return self.of_type(DATABASE)

    @property
    def services(self) -> List[ComponentView]:
        return self.of_type(SERVICE)

    @property
    def llms(self) -> List[ComponentView]:
        return self.of_type(LLM)


def build_corpus(graph: ArchitectureGraph, repo_name: str, description: str, readme: ReadmeContext) -> str:
    labels = " ".join(n.label.lower() for n in graph.nodes)
    descriptions = " ".join((n.description or "").lower() for n in graph.nodes)
    return f"{labels} {descriptions} {repo_name.lower()} {(description or '').lower()} {readme.keywords}"


def build_context(
    graph: ArchitectureGraph,
    readme: str = "",
    description: str = "",
    repo_name: str = "",
) -> NarrativeContext:
    types = graph.types_present()
    traits = GraphTraits(
        has_api=API in types,
        has_database=DATABASE in types,
        has_llm=LLM in types,
        node_count=len(graph.nodes),
    )
    name = repo_name or (graph.nodes[0].label if graph.nodes else "this project")
    readme_ctx = extract_readme_context(readme)
    corpus = build_corpus(graph, name, description, readme_ctx)
    components = components_from_graph(graph)

    return NarrativeContext(
        repo_name=name,
        components=components,
        readme=readme_ctx,
        domain=infer_domain(corpus, traits, readme_ctx.purpose),
        traits=traits,
        duplicates=duplicate_groups(components),
        relationships=relationships(components),
        edge_count=len(graph.edges),
    )
