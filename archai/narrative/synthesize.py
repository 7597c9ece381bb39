"""
Narrative entry points.
"""

import logging
from typing import Optional, Union

from ..analyzer.models import ArchitectureGraph
from .context import build_context
from .providers import DEFAULT_TIMEOUT_S, InsightProvider, get_provider
from .templates import render_narrative

logger = logging.getLogger(__name__)

FALLBACK_INSIGHTS = """**System Overview**:
Unable to generate detailed onboarding insights for this repository. This may be due to a network issue or the repository structure being too complex to analyze automatically.

**Manual Exploration Tips**:
- Start by reading the README.md file in the root directory
- Look for package.json, requirements.txt, or similar files to identify the tech stack
- Check for docker-compose.yml or Dockerfile to understand deployment
- Explore the main source directory (often src/, app/, or lib/)
- Look for test files to understand expected behavior

**Common Next Steps**:
- Set up the development environment following the README
- Run the application locally to see it in action
- Read through configuration files (.env.example, config/)
- Review the API routes or entry points
- Check documentation folders if they exist"""


def synthesize_narrative(
    graph: ArchitectureGraph,
    readme: str = "",
    description: str = "",
    repo_name: str = "",
) -> str:
    """Render the five-section narrative from rule tables. Raises on bad input."""
    ctx = build_context(graph, readme=readme or "", description=description or "", repo_name=repo_name)
    return render_narrative(ctx)


def generate_insights(
    graph: ArchitectureGraph,
    readme: Optional[str] = None,
    description: Optional[str] = None,
    repo_name: str = "",
    provider: Union[str, InsightProvider, None] = None,
    model: Optional[str] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> str:
    """
    Narrative for a finished graph that never raises.

    Any failure, from README handling to a remote backend, yields
    FALLBACK_INSIGHTS instead.
    """
    try:
        backend = provider if isinstance(provider, InsightProvider) else get_provider(provider, model)
        logger.debug(f"Generating insights with provider {backend.name}")
        text = backend.generate(
            graph,
            readme=readme or "",
            description=description or "",
            timeout_s=timeout_s,
            repo_name=repo_name,
        )
        if not text or not text.strip():
            logger.warning("Insight provider returned empty text, using fallback")
            return FALLBACK_INSIGHTS
        return text
    except Exception as e:
        logger.warning(f"Insight generation failed, using fallback: {e}")
        return FALLBACK_INSIGHTS
