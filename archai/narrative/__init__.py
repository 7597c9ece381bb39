"""
Narrative synthesis: turns an architecture graph into onboarding text.
"""

from .components import DuplicateGroup, duplicate_groups, normalize_base_name, relationships
from .context import NarrativeContext, build_context
from .domain import GraphTraits, ProjectDomain, infer_domain
from .providers import InsightProvider, get_provider
from .readme import ReadmeContext, extract_readme_context
from .sections import split_sections
from .synthesize import FALLBACK_INSIGHTS, generate_insights, synthesize_narrative
from .templates import SECTION_TITLES

__all__ = [
    "DuplicateGroup",
    "FALLBACK_INSIGHTS",
    "GraphTraits",
    "InsightProvider",
    "NarrativeContext",
    "ProjectDomain",
    "ReadmeContext",
    "SECTION_TITLES",
    "build_context",
    "duplicate_groups",
    "extract_readme_context",
    "generate_insights",
    "get_provider",
    "infer_domain",
    "normalize_base_name",
    "relationships",
    "split_sections",
    "synthesize_narrative",
]
