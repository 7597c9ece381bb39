"""
Component-level views of a graph: duplicate groups, roles, relationships
and one-line purpose descriptions.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from ..analyzer.models import API, DATABASE, LLM, SERVICE, ArchitectureGraph


@dataclass
class ComponentView:
    name: str
    type: str
    dependencies: List[str] = field(default_factory=list)
    code_path: str = ""
    description: str = ""
    connections: int = 0


@dataclass
class ComponentInstance:
    name: str
    path: str
    role: str
    dependencies: List[str]
    connections: int


@dataclass
class DuplicateGroup:
    base_name: str
    instances: List[ComponentInstance]


Predicate = Callable[[ComponentView], bool]


def name_matches(pattern: str) -> Predicate:
    return lambda c: re.search(pattern, c.name.lower()) is not None


def path_matches(pattern: str) -> Predicate:
    return lambda c: re.search(pattern, c.code_path.lower()) is not None


def desc_contains(word: str) -> Predicate:
    return lambda c: word in c.description.lower()


def of_type(node_type: str) -> Predicate:
    return lambda c: c.type == node_type


def any_of(*preds: Predicate) -> Predicate:
    return lambda c: any(p(c) for p in preds)


def all_of(*preds: Predicate) -> Predicate:
    return lambda c: all(p(c) for p in preds)


def not_(pred: Predicate) -> Predicate:
    return lambda c: not pred(c)


def components_from_graph(graph: ArchitectureGraph) -> List[ComponentView]:
    return [
        ComponentView(
            name=n.label,
            type=n.type,
            dependencies=list(n.dependencies),
            code_path=n.code_path or "",
            description=n.description or "",
            connections=n.connections,
        )
        for n in graph.nodes
    ]


# Duplicate grouping

ROLE_SUFFIXES = r"service|client|server|api|sdk|integration|config|functions?"
SEPARATED_SUFFIX_RE = re.compile(rf"[-_\s]({ROLE_SUFFIXES})$", re.IGNORECASE)
CAMEL_SUFFIX_RE = re.compile(r"(?<=[a-z0-9])(Service|Client|Server|Api|API|Sdk|SDK|Integration|Config|Functions?)$")


def normalize_base_name(name: str) -> str:
    """Strip one trailing role suffix and lower-case ("AuthClient" -> "auth")."""
    stripped = SEPARATED_SUFFIX_RE.sub("", name.strip())
    if stripped == name.strip():
        stripped = CAMEL_SUFFIX_RE.sub("", stripped)
    return (stripped or name).strip().lower()


ROLE_RULES: List[Tuple[Predicate, str]] = [
    (path_matches(r"/client|/frontend|/src/integrations"), "client-side"),
    (path_matches(r"/server|/backend|/api"), "server-side"),
    (path_matches(r"/functions"), "serverless function"),
    (name_matches(r"auth"), "authentication"),
    (name_matches(r"storage|upload"), "file storage"),
    (of_type(DATABASE), "data persistence"),
    (of_type(API), "API layer"),
]
DEFAULT_ROLE = "core module"


def infer_role(component: ComponentView) -> str:
    for pred, role in ROLE_RULES:
        if pred(component):
            return role
    return DEFAULT_ROLE


def duplicate_groups(components: List[ComponentView]) -> List[DuplicateGroup]:
    groups: Dict[str, List[ComponentView]] = {}
    for comp in components:
        groups.setdefault(normalize_base_name(comp.name), []).append(comp)

    return [
        DuplicateGroup(
            base_name=base,
            instances=[
                ComponentInstance(
                    name=c.name,
                    path=c.code_path,
                    role=infer_role(c),
                    dependencies=c.dependencies,
                    connections=c.connections,
                )
                for c in members
            ],
        )
        for base, members in groups.items()
        if len(members) > 1
    ]


# Relationships

MAX_DEPENDENCIES_PER_COMPONENT = 3

RELATIONSHIP_PURPOSES = {
    DATABASE: "data persistence",
    API: "external communication",
    LLM: "AI processing",
}
PAIR_PURPOSES = {
    (API, SERVICE): "business logic",
}


def relationship_purpose(source_type: str, target_type: str) -> str:
    if target_type in RELATIONSHIP_PURPOSES:
        return RELATIONSHIP_PURPOSES[target_type]
    return PAIR_PURPOSES.get((source_type, target_type), "functionality")


def relationships(components: List[ComponentView]) -> List[str]:
    by_name: Dict[str, ComponentView] = {}
    for c in components:
        by_name.setdefault(c.name, c)

    lines: List[str] = []
    for comp in components:
        for dep in comp.dependencies[:MAX_DEPENDENCIES_PER_COMPONENT]:
            target = by_name.get(dep)
            if target is None or target is comp:
                continue
            purpose = relationship_purpose(comp.type, target.type)
            lines.append(f"**{comp.name}** → **{dep}** for {purpose}")
    return lines


# Purpose descriptions

ComponentRule = Tuple[Optional[str], Predicate, str]  # (required subcase, predicate, text)

DOMAIN_COMPONENT_RULES: Dict[str, List[ComponentRule]] = {
    "scraper": [
        ("financial", name_matches(r"ticker|symbol"),
         "finds and extracts stock ticker symbols (like AAPL, TSLA) from text or APIs"),
        ("financial", all_of(name_matches(r"fetch|download|get"), name_matches(r"news|article")),
         "connects to financial news APIs and downloads articles about specific stocks"),
        ("financial", name_matches(r"sentiment|analyz"),
         "analyzes whether news about a stock is positive, negative, or neutral using NLP"),
        ("financial", name_matches(r"price|quote|market"),
         "retrieves current and historical stock prices from market data APIs"),
        (None, name_matches(r"fetch|download|get|crawl"),
         "connects to websites or APIs and downloads the raw data"),
        (None, name_matches(r"parse|extract"),
         "parses HTML/JSON and pulls out the specific information you need"),
        (None, name_matches(r"stor|save|db|database"),
         "saves all the collected data to a database for later analysis"),
        (None, name_matches(r"clean|process|transform"),
         "cleans messy data, removes duplicates, and standardizes formats"),
    ],
    "dashboard": [
        (None, name_matches(r"chart|visual|graph"),
         "renders interactive charts and graphs to visualize trends and patterns"),
        (None, any_of(name_matches(r"data|query"), of_type(DATABASE)),
         "queries the database and aggregates numbers for display"),
        (None, name_matches(r"filter|search"),
         "lets users filter data by date, category, or custom criteria"),
        (None, name_matches(r"export|report"),
         "generates downloadable reports in PDF, CSV, or Excel format"),
        (None, name_matches(r"auth|login"),
         "manages user login and controls who can access which dashboards"),
    ],
    "chat": [
        (None, name_matches(r"message|chat|conversation"),
         "manages the chat interface and message history"),
        (None, name_matches(r"llm|ai|gpt|claude"),
         "sends user questions to AI (GPT/Claude) and gets intelligent responses"),
        (None, name_matches(r"context|memory|session"),
         "remembers the conversation history so the bot knows what you talked about earlier"),
        (None, name_matches(r"intent|understand"),
         "figures out what the user is actually asking for (booking, info, help, etc.)"),
    ],
    "ecommerce": [
        (None, name_matches(r"product|catalog|inventory"),
         "manages the product catalog, prices, stock levels, and descriptions"),
        (None, name_matches(r"cart|basket"),
         "keeps track of what customers have added to their cart"),
        (None, name_matches(r"payment|checkout|stripe"),
         "processes credit card payments through Stripe/PayPal"),
        (None, name_matches(r"order"),
         "tracks orders from checkout through shipping to delivery"),
    ],
    "code_analysis": [
        (None, all_of(name_matches(r"parse|analyz"), not_(name_matches(r"components"))),
         "parses source code files and understands the structure"),
        (None, name_matches(r"graph|visual"),
         "creates visual diagrams showing how different parts connect"),
        (None, name_matches(r"insight|ai|llm"),
         "uses AI to explain what the code does and suggest improvements"),
        (None, name_matches(r"upload|fetch"),
         "lets you upload your codebase or pull it from GitHub"),
    ],
}

GENERIC_COMPONENT_RULES: List[Tuple[Predicate, str]] = [
    (any_of(desc_contains("api"), of_type(API)),
     "acts as the API layer that receives requests and routes them to the right handler"),
    (any_of(desc_contains("database"), of_type(DATABASE)),
     "stores all the data persistently so nothing is lost when the app restarts"),
    (any_of(desc_contains("auth"), name_matches(r"auth|login")),
     "manages user authentication (login, signup, password resets)"),
    (of_type(LLM),
     "processes AI-powered features using large language models"),
    (all_of(name_matches(r"component|ui"), desc_contains("reusable")),
     "contains reusable UI pieces (buttons, forms, etc.) used throughout the app"),
]


def describe_component(component: ComponentView, domain_key: str, subcase: Optional[str] = None) -> str:
    """One-line purpose: domain rules, then generic rules, then a name template."""
    for required, pred, text in DOMAIN_COMPONENT_RULES.get(domain_key, []):
        if required is not None and required != subcase:
            continue
        if pred(component):
            return text
    for pred, text in GENERIC_COMPONENT_RULES:
        if pred(component):
            return text
    return f"handles {component.name.lower()} functionality for the application"
