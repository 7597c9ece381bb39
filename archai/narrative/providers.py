"""
Insight providers: the template synthesizer and external LLM backends.
"""

import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from ..analyzer.errors import ExternalServiceError
from ..analyzer.models import ArchitectureGraph
from .context import build_context
from .templates import render_narrative

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30.0

SYSTEM_PROMPT = (
    "You are an expert software architect specializing in system design and architecture analysis. "
    "Provide clear, actionable insights."
)


def build_prompt(graph: ArchitectureGraph, description: str = "") -> str:
    """Prompt listing every node and the number of dependencies between them."""
    services = "\n".join(
        f"- {n.label} ({n.type}): {n.description or 'No description'}" for n in graph.nodes
    )
    if graph.edges:
        edges_info = f"Dependencies: {len(graph.edges)} connections between services"
    else:
        edges_info = "No explicit dependencies defined"
    about = f"\nRepository description: {description}\n" if description else ""

    return f"""Analyze this software architecture and provide key insights:
{about}
Services detected:
{services}

{edges_info}

Provide a concise analysis covering:
1. Overall architecture pattern (e.g., microservices, monolith, event-driven)
2. Key strengths of this architecture
3. Potential scalability concerns
4. Security considerations
5. Recommended improvements

Keep the analysis under 200 words and focus on actionable insights."""


class InsightProvider(ABC):
    """Abstract base class for insight providers."""

    def __init__(self, model: Optional[str] = None):
        self.model = model
        self.name = self.__class__.__name__.replace("Provider", "").lower()

    @abstractmethod
    def generate(
        self,
        graph: ArchitectureGraph,
        readme: str = "",
        description: str = "",
        timeout_s: float = DEFAULT_TIMEOUT_S,
        repo_name: str = "",
    ) -> str:
        """
        Produce narrative text for a finished graph.

        Args:
            graph: Graph produced by the analyzer
            readme: Raw README text, may be empty
            description: Short repository description, may be empty
            timeout_s: Timeout for remote calls in seconds
            repo_name: Display name of the repository

        Returns:
            Narrative text using "**Title**:" section headers

        Raises:
            ExternalServiceError: when a remote backend fails
        """


class HeuristicProvider(InsightProvider):
    """Offline provider built on the rule tables; never calls out."""

    def __init__(self, model: Optional[str] = None):
        super().__init__(model)
        self.name = "heuristic"

    def generate(self, graph, readme="", description="", timeout_s=DEFAULT_TIMEOUT_S, repo_name=""):
        ctx = build_context(graph, readme=readme, description=description, repo_name=repo_name)
        logger.debug(f"Heuristic narrative: domain={ctx.domain.key} subcase={ctx.domain.subcase}")
        return render_narrative(ctx)


class OpenAIProvider(InsightProvider):
    """OpenAI chat completions provider."""

    def __init__(self, model: Optional[str] = None):
        super().__init__(model or "gpt-3.5-turbo")
        self.name = "openai"
        self.api_key = os.getenv("OPENAI_API_KEY")

    def generate(self, graph, readme="", description="", timeout_s=DEFAULT_TIMEOUT_S, repo_name=""):
        if not self.api_key:
            raise ExternalServiceError("OPENAI_API_KEY not configured")
        try:
            import openai
        except ImportError as e:
            raise ExternalServiceError("openai package not installed; install archai[llm]") from e

        start_time = time.time()
        try:
            client = openai.OpenAI(api_key=self.api_key, timeout=timeout_s)
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(graph, description)},
                ],
                temperature=0.7,
                max_tokens=500,
            )
        except Exception as e:
            raise ExternalServiceError(f"OpenAI API call failed: {e}") from e

        duration_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"OpenAI API call completed in {duration_ms}ms")

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExternalServiceError("No insights generated from AI")
        return content


class AnthropicProvider(InsightProvider):
    """Anthropic messages provider."""

    def __init__(self, model: Optional[str] = None):
        super().__init__(model or "claude-3-haiku-20240307")
        self.name = "anthropic"
        self.api_key = os.getenv("ANTHROPIC_API_KEY")

    def generate(self, graph, readme="", description="", timeout_s=DEFAULT_TIMEOUT_S, repo_name=""):
        if not self.api_key:
            raise ExternalServiceError("ANTHROPIC_API_KEY not configured")
        try:
            import anthropic
        except ImportError as e:
            raise ExternalServiceError("anthropic package not installed; install archai[llm]") from e

        start_time = time.time()
        try:
            client = anthropic.Anthropic(api_key=self.api_key, timeout=timeout_s)
            response = client.messages.create(
                model=self.model,
                max_tokens=500,
                temperature=0.7,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": build_prompt(graph, description)}],
            )
        except Exception as e:
            raise ExternalServiceError(f"Anthropic API call failed: {e}") from e

        duration_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"Anthropic API call completed in {duration_ms}ms")

        text = "".join(
            block.text for block in (response.content or []) if getattr(block, "type", "") == "text"
        )
        if not text:
            raise ExternalServiceError("No insights generated from AI")
        return text


PROVIDERS: Dict[str, Type[InsightProvider]] = {
    "heuristic": HeuristicProvider,
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}


def get_provider(provider_name: Optional[str] = None, model: Optional[str] = None) -> InsightProvider:
    """Get insight provider instance."""
    if not provider_name:
        provider_name = os.getenv("ARCHAI_INSIGHTS_PROVIDER", "heuristic")

    if not model:
        model = os.getenv("ARCHAI_INSIGHTS_MODEL")

    provider_class = PROVIDERS.get(provider_name.lower())
    if not provider_class:
        logger.warning(f"Unknown insights provider: {provider_name}, using heuristic")
        provider_class = HeuristicProvider

    return provider_class(model)
