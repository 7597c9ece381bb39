"""
Section renderers for the architecture narrative.

Each section starts with a "**Title**:" line on its own; presentation layers
split the text on that convention, so it must not change.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..analyzer.models import LLM
from .components import ComponentView, Predicate, describe_component, name_matches, of_type
from .context import NarrativeContext

SECTION_TITLES = ["Overview", "Processes", "Core Principles", "Important Features", "Risks"]
MAX_FEATURED_COMPONENTS = 6
MAX_README_FEATURES = 6
MAX_RELATIONSHIPS = 6
LARGE_GRAPH_NODES = 5


def header(title: str) -> str:
    return f"**{title}**:"


def _find(ctx: NarrativeContext, pred: Predicate) -> Optional[ComponentView]:
    for c in ctx.components:
        if pred(c):
            return c
    return None


def _name(component: Optional[ComponentView], default: str) -> str:
    return component.name if component is not None else default


def _short_path(path: str, parts: int) -> str:
    return "/".join(path.split("/")[-parts:])


# Overview

def _analogy(ctx: NarrativeContext) -> str:
    t = ctx.traits
    api = _name(ctx.first_of_type("api"), "The API")
    db = _name(ctx.first_of_type("database"), "the database")
    svc = _name(ctx.first_of_type("service"), "the core modules")
    if t.has_database and t.has_api:
        return f"{api} is the front desk that takes requests, {svc} do the actual work, and {db} is where everything gets saved."
    if t.has_api:
        return f"{api} routes everything like a switchboard, connecting {ctx.domain.audience} to the right features."
    if t.has_database:
        return f"{_name(ctx.first_of_type('database'), 'The database')} acts as the system's memory, while other parts read and update it."
    return "Each part handles a specific job, and they all communicate to get things done."


def render_overview(ctx: NarrativeContext) -> str:
    d = ctx.domain
    intro = f"This is a **{d.label}** designed to {d.purpose}. It's built for {d.audience}."
    if d.specific_context:
        intro += " " + d.specific_context
    if ctx.readme.use_case:
        intro += "\n\n*From the README:* " + ctx.readme.use_case

    body = "Think of it like this: " + _analogy(ctx)
    if ctx.readme.tech_stack:
        body = f"**Tech Stack:** {', '.join(ctx.readme.tech_stack)}\n\n" + body
    if ctx.readme.features:
        bullets = "\n".join(f"- {f}" for f in ctx.readme.features[:MAX_README_FEATURES])
        body += f"\n\n**Key Features:**\n{bullets}"

    return f"{header('Overview')}\n{intro}\n\n{body}"


# Processes

@dataclass(frozen=True)
class FlowStep:
    title: str
    text: str                        # may use {name} and {audience}
    finder: Optional[Predicate] = None
    default: str = ""


@dataclass(frozen=True)
class Flow:
    heading: str
    steps: List[FlowStep]


FLOWS: Dict[str, Flow] = {
    "scraper:financial": Flow("**Stock news scraping flow:**", [
        FlowStep("Find tickers", "{name} scans text or calls APIs to get stock symbols (AAPL, TSLA, etc.)",
                 name_matches(r"ticker|symbol"), "Ticker extractor"),
        FlowStep("Fetch articles", "{name} downloads articles about each ticker from financial news sites",
                 name_matches(r"fetch|news"), "News fetcher"),
        FlowStep("Analyze sentiment", "{name} reads each article and determines if it's positive/negative/neutral",
                 name_matches(r"sentiment|analyz"), "Sentiment analyzer"),
        FlowStep("Get prices", "{name} pulls current stock prices from market APIs",
                 name_matches(r"price|quote"), "Price fetcher"),
        FlowStep("Save everything", "{name} stores tickers, articles, sentiment scores, and prices for later analysis",
                 of_type("database"), "Database"),
    ]),
    "scraper": Flow("**Web scraping flow:**", [
        FlowStep("Target sites", "{name} visits the websites you want to scrape",
                 name_matches(r"crawl|fetch|download"), "Crawler"),
        FlowStep("Extract data", "{name} pulls out the specific information from HTML/JSON",
                 name_matches(r"parse|extract"), "Parser"),
        FlowStep("Clean it up", "{name} removes duplicates, fixes formatting, validates data",
                 name_matches(r"clean|process"), "Processor"),
        FlowStep("Store results", "{name} saves everything for querying and analysis",
                 of_type("database"), "Database"),
    ]),
    "dashboard": Flow("**Dashboard data flow:**", [
        FlowStep("User opens dashboard", "{name} loads and requests data", of_type("api"), "Frontend"),
        FlowStep("Query database", "{name} aggregates numbers, calculates metrics", of_type("database"), "Database"),
        FlowStep("Format for display", "{name} packages data into chart-ready format", of_type("service"), "Backend"),
        FlowStep("Render visualizations", "{name} draw interactive graphs",
                 name_matches(r"chart|visual|graph"), "Chart components"),
        FlowStep("Filter/drill down", "User clicks to filter → repeats steps 2-4 with new criteria"),
    ]),
    "chat": Flow("**Chat conversation flow:**", [
        FlowStep("User sends message", "{name} receives the text", name_matches(r"message|chat"), "Chat interface"),
        FlowStep("Load context", "{name} retrieves previous messages to maintain conversation continuity",
                 name_matches(r"context|memory"), "Context manager"),
        FlowStep("Generate response", "{name} sends everything to GPT/Claude and gets an intelligent reply",
                 of_type(LLM), "AI service"),
        FlowStep("Save conversation", "{name} stores the exchange for future context", of_type("database"), "Database"),
        FlowStep("Display to user", "Response appears in the chat interface"),
    ]),
    "code_analysis": Flow("**Code analysis flow:**", [
        FlowStep("Upload/fetch code", "{name} gets your codebase (zip upload or GitHub URL)",
                 name_matches(r"upload|fetch|github"), "Input handler"),
        FlowStep("Parse structure", "{name} reads files and understands how they're organized",
                 name_matches(r"parse|analyz"), "Parser"),
        FlowStep("Build graph", "{name} creates a visual map of components and connections",
                 name_matches(r"graph|visual"), "Graph builder"),
        FlowStep("Generate insights", "{name} analyzes patterns and writes explanations", of_type(LLM), "AI service"),
        FlowStep("Display results", "Interactive graph + AI insights appear in the UI"),
    ]),
    "request": Flow("", [
        FlowStep("Request arrives", "{name} receives it from {audience}", of_type("api"), "API"),
        FlowStep("Route to handler", "{name} picks it up based on the endpoint", of_type("service"), "Service layer"),
        FlowStep("Process", "Business logic validates, transforms, and prepares data"),
        FlowStep("Database interaction", "{name} queries or updates based on needs", of_type("database"), "Database"),
        FlowStep("Send response", "Results flow back through the chain to {audience}"),
    ]),
}


def select_flow(ctx: NarrativeContext) -> Optional[Flow]:
    d = ctx.domain
    if d.subcase and f"{d.key}:{d.subcase}" in FLOWS:
        return FLOWS[f"{d.key}:{d.subcase}"]
    if d.key in FLOWS:
        return FLOWS[d.key]
    if ctx.traits.has_api and ctx.traits.has_database:
        return FLOWS["request"]
    return None


def _render_flow(ctx: NarrativeContext, flow: Flow) -> str:
    lines = []
    for i, step in enumerate(flow.steps, 1):
        name = _name(_find(ctx, step.finder), step.default) if step.finder else ""
        text = step.text.format(name=name, audience=ctx.domain.audience)
        lines.append(f"{i}. **{step.title}** → {text}")
    steps = "\n".join(lines)
    return f"{flow.heading}\n{steps}" if flow.heading else steps


def _generic_flow(ctx: NarrativeContext) -> str:
    root = _name(ctx.components[0] if ctx.components else None, "Main module")
    helpers = ", ".join(c.name for c in ctx.components[1:3])
    return "\n".join([
        f"1. **Initialize** → {root} starts up",
        f"2. **Delegate work** → Each component ({helpers}) handles its part",
        "3. **Coordinate** → They communicate and share data",
        "4. **Complete** → Results get assembled and delivered",
    ])


def render_processes(ctx: NarrativeContext) -> str:
    flow = select_flow(ctx)
    body = _render_flow(ctx, flow) if flow is not None else _generic_flow(ctx)
    return f"{header('Processes')}\nHere's the actual workflow for this {ctx.domain.label}:\n\n{body}"


# Core principles

def render_core_principles(ctx: NarrativeContext) -> str:
    t = ctx.traits
    root = _name(ctx.components[0] if ctx.components else None, "Root folder")

    stack = []
    if t.has_api:
        stack.append("API framework")
    if t.has_database:
        stack.append("database")
    if t.has_llm:
        stack.append("AI")
    stack_hint = f" ({', '.join(stack)})" if stack else ""

    if ctx.services:
        core = ctx.services[0].name
    elif len(ctx.components) > 1:
        core = ctx.components[1].name
    else:
        core = "Core modules"

    items = [
        f"**{root}** → Look at package.json or README to see what technologies this uses{stack_hint}. "
        "This tells you how to set it up.",
        f"**{core}** → This is where the main work happens. "
        'Look for files with names like "handler", "processor", or "controller".',
    ]
    if t.has_api:
        items.append(
            f"**{_name(ctx.first_of_type('api'), 'API folder')}** → Check routes/ or api/ to see all the "
            "endpoints (URLs) this responds to. Each endpoint = one thing the system can do."
        )
    if t.has_database:
        items.append(
            f"**{_name(ctx.first_of_type('database'), 'Database schemas')}** → Look at migrations/ or models/ "
            "to see what data gets stored and how it's organized."
        )
    if t.has_llm:
        items.append(
            f"**{_name(ctx.first_of_type(LLM), 'AI files')}** → See how prompts are written and how AI "
            "responses get used."
        )

    numbered = "\n\n".join(f"{i}. {item}" for i, item in enumerate(items, 1))
    tip = ('**Pro tip:** Search the code for "TODO" or "FIXME" comments - developers leave notes '
           "about things that need fixing or improving.")
    return f"{header('Core Principles')}\nWhere to start exploring:\n\n{numbered}\n\n{tip}"


# Important features

OVERFLOW_TOPICS = {
    "scraper": "data collection and processing",
    "dashboard": "visualization and reporting",
    "chat": "conversation management",
}


def _component_entry(ctx: NarrativeContext, index: int, comp: ComponentView) -> str:
    path_hint = f" (`{_short_path(comp.code_path, 2)}`)" if comp.code_path else ""
    purpose = describe_component(comp, ctx.domain.key, ctx.domain.subcase)
    entry = f"**{index}. {comp.name}**{path_hint}\n   {purpose}"
    if comp.dependencies:
        extra = len(comp.dependencies) - 2
        more = f" +{extra} more" if extra > 0 else ""
        entry += f"\n   → Depends on: {', '.join(comp.dependencies[:2])}{more}"
    return entry


def _duplicates_block(ctx: NarrativeContext) -> str:
    blocks = []
    for group in ctx.duplicates:
        lines = [f"*{group.base_name[:1].upper()}{group.base_name[1:]}* has {len(group.instances)} instances:"]
        for inst in group.instances:
            deps = ""
            if inst.dependencies:
                extra = len(inst.dependencies) - 1
                deps = f" → connects to {inst.dependencies[0]}" + (f" +{extra} more" if extra > 0 else "")
            lines.append(f"- **{inst.name}** (`{_short_path(inst.path, 3)}`) - {inst.role}{deps}")
        blocks.append("\n".join(lines))
    why = ("**Why multiple instances?** Different contexts need different configurations. Client-side code "
           "runs in browsers with limited permissions, while server-side has full access. Serverless "
           "functions are isolated instances that scale independently.")
    return "**Component Instances (Multiple Roles):**\n" + "\n\n".join(blocks) + "\n\n" + why


def render_important_features(ctx: NarrativeContext) -> str:
    t = ctx.traits
    parts = [f"{header('Important Features')}\nWhat each major part does for this {ctx.domain.label}:"]
    parts.append("\n\n".join(
        _component_entry(ctx, i, c) for i, c in enumerate(ctx.components[:MAX_FEATURED_COMPONENTS], 1)
    ))

    remaining = len(ctx.components) - MAX_FEATURED_COMPONENTS
    if remaining > 0:
        topic = OVERFLOW_TOPICS.get(ctx.domain.key, "supporting features")
        parts.append(f"*Plus {remaining} more component{'s' if remaining > 1 else ''} handling {topic}.*")

    if ctx.duplicates:
        parts.append(_duplicates_block(ctx))

    if t.has_database:
        parts.append(
            f"**Data Integrity**: {_name(ctx.first_of_type('database'), 'The database')} is the source of truth. "
            "All writes must go through it. Never bypass with direct file writes or in-memory state that "
            "doesn't persist."
        )
    if t.has_api:
        parts.append(
            f"**API Contracts**: {_name(ctx.first_of_type('api'), 'External API')} interfaces are public "
            "contracts. Breaking changes require versioning (v1, v2) or deprecation periods."
        )
    if t.has_llm:
        parts.append(
            "**AI Limits**: LLM tokens cost money and have rate limits. Cache responses aggressively. "
            "Implement retries with exponential backoff."
        )

    if 0 < len(ctx.relationships) <= MAX_RELATIONSHIPS:
        rels = "\n".join(f"- {r}" for r in ctx.relationships)
        parts.append(f"**Key Relationships:**\n{rels}")

    return "\n\n".join(parts)


# Risks

@dataclass(frozen=True)
class RiskBlock:
    title: str
    lines: List[str]
    when: Callable[[NarrativeContext], bool] = lambda ctx: True


RISK_BLOCKS: List[RiskBlock] = [
    RiskBlock("When calling external services:", [
        "APIs have rate limits (like \"slow down, you're asking too much\"). If you hit one, wait a bit "
        "(1s, then 2s, then 4s) before trying again.",
        "Login tokens expire. Check if it's still valid before each use, don't wait for it to fail.",
        "Network requests can hang forever. Set a timeout (5-10 seconds max) so users aren't stuck waiting.",
    ], lambda ctx: ctx.traits.has_api),
    RiskBlock("Database problems:", [
        "Forgetting to close connections = \"Too many connections\" error and everything stops working.",
        "Slow queries happen when there's no index. A query that takes 100ms could take 10 seconds without one.",
        "Two people changing the same data at once = race condition. Use transactions to prevent this.",
        "Database upgrades (migrations) can fail halfway. Always have a way to undo them.",
    ], lambda ctx: ctx.traits.has_database),
    RiskBlock("AI quirks:", [
        "AI responses are slow (2-10 seconds). Show a loading spinner so users know it's working.",
        "AI has token limits (like character counts). Long inputs get cut off or rejected.",
        "Same question = different answer every time. Don't expect exact formatting.",
        "AI costs money per use. Monitor spending or you'll get a surprise bill.",
    ], lambda ctx: ctx.traits.has_llm),
]


def _setup_lines(ctx: NarrativeContext) -> List[str]:
    lines = ["Missing environment variables (.env file) cause weird \"undefined\" errors. "
             "Copy .env.example and fill in all values."]
    if ctx.traits.has_api:
        lines.append("CORS errors block browser requests. Add your local and production URLs to the allowed list.")
    lines.append("\"Port already in use\" = something else is running on that port. Kill it or pick a different port.")
    return lines


def _deployment_lines(ctx: NarrativeContext) -> List[str]:
    if ctx.traits.node_count > LARGE_GRAPH_NODES:
        first = ("Start services in order: database first, then API, then frontend. "
                 "Add health checks so they wait for each other.")
    else:
        first = "Run database migrations BEFORE deploying new code. New code expects the updated database structure."
    lines = [
        first,
        "Using different tech in development vs production hides bugs. "
        "Keep them the same (both use Postgres, not SQLite in dev).",
    ]
    if ctx.traits.has_database:
        lines.append("Test your backups monthly. Half of all backups are broken and you only find out when you need them.")
    lines.append("Secrets accidentally committed to git can't be fully deleted. "
                 "Change all passwords immediately and use git-secrets to prevent it.")
    return lines


def _block(title: str, lines: List[str]) -> str:
    return f"**{title}**\n" + "\n".join(f"- {line}" for line in lines)


def render_risks(ctx: NarrativeContext) -> str:
    blocks = [_block(b.title, b.lines) for b in RISK_BLOCKS if b.when(ctx)]
    if ctx.traits.has_api and ctx.traits.has_database:
        blocks[0] += "\n- If the API crashes, it might leave database connections open. Always close them properly."
    blocks.append(_block("Setup headaches:", _setup_lines(ctx)))
    blocks.append(_block("Deployment gotchas:", _deployment_lines(ctx)))
    return f"{header('Risks')}\nThings that commonly go wrong:\n\n" + "\n\n".join(blocks)


RENDERERS = [
    render_overview,
    render_processes,
    render_core_principles,
    render_important_features,
    render_risks,
]


def render_narrative(ctx: NarrativeContext) -> str:
    return "\n\n".join(render(ctx) for render in RENDERERS)
