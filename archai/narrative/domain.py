"""
Project domain inference from graph text and README content.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

DEFAULT_DOMAIN = "application"


@dataclass(frozen=True)
class GraphTraits:
    """Facts about the graph that some domain signatures depend on."""
    has_api: bool = False
    has_database: bool = False
    has_llm: bool = False
    node_count: int = 0


@dataclass(frozen=True)
class SubCase:
    key: str
    pattern: str
    context: str


@dataclass(frozen=True)
class DomainSignature:
    key: str
    label: str
    pattern: str
    purpose: str
    audience: str
    requires: Callable[[GraphTraits], bool] = lambda t: True
    subcases: Tuple[SubCase, ...] = ()


@dataclass
class ProjectDomain:
    key: str = DEFAULT_DOMAIN
    label: str = "application"
    purpose: str = "manage and organize functionality"
    audience: str = "users"
    subcase: Optional[str] = None
    specific_context: str = ""
    hits: List[str] = field(default_factory=list)


DOMAIN_SIGNATURES: List[DomainSignature] = [
    DomainSignature(
        "dashboard", "dashboard application",
        r"dashboard|admin|panel|analytics|metrics|chart",
        "visualize data and provide insights through interactive charts and metrics",
        "administrators and analysts",
        subcases=(
            SubCase("monitoring", r"monitor|track|observe",
                    "It monitors system performance and displays real-time metrics."),
        ),
    ),
    DomainSignature(
        "scraper", "web scraper",
        r"scraper|crawler|fetch|extract|parse.*news|article|news|ticker",
        "automatically collect and process data from websites",
        "data analysts",
        subcases=(
            SubCase("financial", r"stock|ticker|financial|trading",
                    "It focuses on financial data, tracking stock tickers and market news."),
            SubCase("news", r"news|article|headline",
                    "It collects news articles and headlines from various sources."),
        ),
    ),
    DomainSignature(
        "chat", "chatbot or conversational AI",
        r"chat|bot|message|conversation|ai.*response",
        "interact with users through natural language conversations",
        "end users seeking information or assistance",
        requires=lambda t: t.has_llm,
        subcases=(
            SubCase("support", r"customer.*support|help.*desk",
                    "It provides automated customer support and answers common questions."),
            SubCase("assistant", r"assistant|copilot",
                    "It acts as an AI assistant to help users complete tasks."),
        ),
    ),
    DomainSignature(
        "ecommerce", "e-commerce platform",
        r"e-?commerce|shop|cart|checkout|product|order|payment",
        "enable online shopping with product catalogs, cart management, and checkout",
        "shoppers and store administrators",
    ),
    DomainSignature(
        "cms", "content management system",
        r"blog|cms|content|article|post|publish",
        "create, edit, and publish content",
        "content creators and readers",
    ),
    DomainSignature(
        "auth", "authentication service",
        r"auth|login|signup|user.*management|profile",
        "manage user accounts, authentication, and permissions",
        "application users",
        requires=lambda t: not t.has_llm,
    ),
    DomainSignature(
        "code_analysis", "AI-powered code analysis tool",
        r"generate|create|analyze.*code|insight|architecture",
        "analyze codebases and generate intelligent insights about architecture",
        "developers and technical teams",
        requires=lambda t: t.has_llm,
        subcases=(
            SubCase("visualization", r"visuali[sz]e|graph|diagram",
                    "It creates visual representations of code structure and dependencies."),
            SubCase("documentation", r"documentation|explain",
                    "It generates documentation and explanations from source code."),
        ),
    ),
    DomainSignature(
        "microservices", "microservices platform",
        r"api.*gateway|microservice|orchestrat",
        "coordinate multiple independent services",
        "other services and applications",
        requires=lambda t: t.node_count > 5,
    ),
    DomainSignature(
        "webapp", "web application",
        r"",
        "provide online functionality through a user interface and API",
        "end users",
        requires=lambda t: t.has_api and t.has_database and not t.has_llm,
    ),
]


def infer_domain(corpus: str, traits: GraphTraits, readme_purpose: str = "") -> ProjectDomain:
    """
    Match the corpus against the ordered domain signatures; first match wins.
    Sub-cases are tested against the README purpose snippet, or against the
    whole corpus when no README text is available.
    """
    for sig in DOMAIN_SIGNATURES:
        if not sig.requires(traits):
            continue
        if sig.pattern and not re.search(sig.pattern, corpus, re.IGNORECASE):
            continue

        domain = ProjectDomain(
            key=sig.key,
            label=sig.label,
            purpose=sig.purpose,
            audience=sig.audience,
            hits=[f"domain:{sig.key}"],
        )
        target = readme_purpose or corpus
        for sub in sig.subcases:
            if re.search(sub.pattern, target, re.IGNORECASE):
                domain.subcase = sub.key
                domain.specific_context = sub.context
                domain.hits.append(f"subcase:{sub.key}")
                break
        return domain

    return ProjectDomain()
