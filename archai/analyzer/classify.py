"""
Directory classification rules.

Every directory gets a semantic type and a plain-language description from
ordered rule tables; the first matching row wins and unmatched names fall
through to a generic template, so classification never fails.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .models import API, DATABASE, LLM, SERVICE, DirectoryNode
from .tree import DirectoryTree, siblings


@dataclass(frozen=True)
class TypeRule:
    pattern: str
    type: str


@dataclass(frozen=True)
class DescriptionRule:
    """A description template selected by a directory-name pattern.

    Templates are rendered with str.format and may use: files, files_s,
    subdirs, subdirs_s, name, and sub (the rendered sub_template, or empty
    when the directory has no subdirectories).
    """
    id: str
    pattern: str
    template: str
    sub_template: str = ""


@dataclass(frozen=True)
class Classification:
    type: str
    description: str
    context: str


TYPE_RULES: List[TypeRule] = [
    TypeRule(r"api|server|backend|functions?", API),
    TypeRule(r"db|database|supabase|firebase", DATABASE),
    TypeRule(r"llm|ai|ml", LLM),
]

ROOT_DESCRIPTION = (
    "This is the repository root containing configuration files like package.json, "
    "tsconfig, and other project setup files. All other directories branch out from here."
)

DESCRIPTION_RULES: List[DescriptionRule] = [
    DescriptionRule(
        "source", r"^(src|source)$",
        "The main source code directory - this is where all the application code lives. "
        "Contains {files} files including components, pages, utilities, and business logic{sub}. "
        "This is the heart of the application where developers spend most of their time "
        "writing and maintaining code.",
        ", organized into {subdirs} subdirectories",
    ),
    DescriptionRule(
        "components", r"components?",
        "Reusable UI components that are used throughout the application. Houses {files} "
        "component files like buttons, cards, modals, and forms{sub}. Each component is "
        "self-contained and can be imported wherever needed. When you need to add new UI "
        "elements or modify existing ones, this is where you'll work.",
        ", with {subdirs} subdirectories for organization",
    ),
    DescriptionRule(
        "ui", r"^ui$",
        "The core UI component library containing {files} fundamental building blocks like "
        "buttons, inputs, cards, and dialogs. These primitive components follow a design "
        "system and provide consistent styling across the app. Other components combine "
        "these basic pieces to create more complex features.",
    ),
    DescriptionRule(
        "pages", r"pages?|routes?|views?",
        "Application pages and routes - contains {files} page components. Each file "
        "represents a different page or route in the application. When users navigate to "
        "different URLs, these components are what get rendered. This is where you define "
        "what users see at each URL path.",
    ),
    DescriptionRule(
        "contexts", r"contexts?",
        "Global application state management using React Context API. Contains {files} "
        "context provider{files_s} that handle data needed across multiple components, like "
        "user authentication, theme settings, or app configuration. Instead of passing data "
        "down through many component levels, contexts make it available anywhere in the "
        "component tree.",
    ),
    DescriptionRule(
        "hooks", r"hooks?",
        "Custom React Hooks - {files} reusable functions that encapsulate common logic like "
        "data fetching, form handling, or working with localStorage. When you see the same "
        "logic being repeated across components, it should probably become a custom hook "
        "here. These hooks make your components cleaner and more maintainable.",
    ),
    DescriptionRule(
        "utilities", r"lib|utils|helpers?",
        "Utility functions and helper methods - {files} files of pure functions for common "
        "tasks like formatting dates, validating data, or making API calls. When you need a "
        "function that doesn't involve UI rendering, look here first. These are the building "
        "blocks used throughout the application.",
    ),
    DescriptionRule(
        "backend", r"api|server|backend",
        "Backend API layer with {files} files handling server-side logic, database "
        "operations, and external API calls. Data gets processed, validated, and stored here "
        "before being sent to the frontend. If you're working on data flow, authentication, "
        "or third-party integrations, this is where you'll be.",
    ),
    DescriptionRule(
        "assets", r"public|static|assets",
        "Static assets directory containing {files} files served directly to users. This "
        "includes images, fonts, favicon, and other assets that don't need to be processed by "
        "the build system. Files in this folder are accessible at the root URL path of your "
        "application.",
    ),
    DescriptionRule(
        "styles", r"styles?|css|scss",
        "Styling files for visual design - {files} files containing themes, global styles, "
        "and component styling. May include CSS modules or styling configurations. "
        "Understanding how styling works here is key to maintaining consistent design "
        "throughout the application.",
    ),
    DescriptionRule(
        "integrations", r"integrations?",
        "External service integrations - {files} files connecting the application to "
        "services like payment processors, authentication providers, analytics tools, or "
        "cloud platforms{sub}. Each integration has its own configuration, client setup, and "
        "helper functions.",
        ", organized into {subdirs} integration{subdirs_s}",
    ),
    DescriptionRule(
        "baas", r"supabase|firebase",
        "Backend-as-a-Service configuration managing your backend infrastructure. Includes "
        "{files} files for database schemas, authentication setup, file storage, and "
        "serverless functions{sub}. All database queries, user authentication flows, and file "
        "uploads happen through code defined here.",
        ", with {subdirs} organized sections",
    ),
    DescriptionRule(
        "functions", r"functions?",
        "Serverless/edge functions - {files} functions that run on-demand in response to HTTP "
        "requests or events. Each function is isolated and can be deployed independently. "
        "They're used for API endpoints, scheduled jobs, webhooks, or any server-side logic "
        "that doesn't require a full backend server.",
    ),
    DescriptionRule(
        "types", r"types?|interfaces?",
        "Type definitions - {files} files describing the shape of data structures used "
        "throughout the application, like user objects, API responses, and component props. "
        "Understanding these types helps prevent bugs by enforcing data contracts and "
        "providing autocomplete in your editor.",
    ),
    DescriptionRule(
        "models", r"models?",
        "Data models defining {files} database table structures, validation rules, and "
        "relationships between different data entities. These models represent core business "
        "objects like users, products, or orders, and control how data is stored and "
        "validated.",
    ),
    DescriptionRule(
        "config", r"config|settings",
        "Application configuration - {files} files containing environment-specific configs, "
        "build configurations, and feature flags. Modify these files to change application "
        "behavior across different environments like development, staging, or production.",
    ),
    DescriptionRule(
        "tests", r"test|spec|__tests__",
        "Automated test suite with {files} test files verifying code works correctly. "
        "Includes unit tests for individual functions, integration tests for components "
        "working together, and end-to-end tests for full user workflows. Run these tests "
        "before deploying to catch bugs early.",
    ),
    DescriptionRule(
        "docs", r"docs?|documentation",
        "Project documentation containing {files} files with API guides, architecture "
        "decisions, and setup instructions. Read through these to understand project "
        "context, design decisions, and how to contribute to the codebase.",
    ),
    DescriptionRule(
        "migrations", r"migrations?",
        "Database migration files that track schema changes over time. Each migration "
        "represents a set of changes to database tables, columns, or indexes. Run these in "
        "order to update your database structure when deploying new versions. Contains "
        "{files} migration{files_s}.",
    ),
    DescriptionRule(
        "middleware", r"middleware",
        "Middleware functions that process requests before they reach your route handlers. "
        "These handle tasks like authentication verification, logging, error handling, and "
        "request validation. Houses {files} middleware function{files_s} that run in a "
        "pipeline for every API call.",
    ),
    DescriptionRule(
        "schemas", r"schema",
        "Database schemas defining the structure of your data tables, fields, and "
        "relationships. These schemas validate data before it's stored and ensure "
        "consistency. Contains {files} schema definition{files_s} that act as blueprints for "
        "your database.",
    ),
    DescriptionRule(
        "services", r"service",
        "Service layer containing {files} business logic module{files_s}. Services "
        "encapsulate complex operations, coordinate between different parts of the app, and "
        "keep your controllers clean. This is where the real work happens - data processing, "
        "calculations, and orchestration.",
    ),
    DescriptionRule(
        "controllers", r"controller",
        "Controllers handling {files} API endpoint group{files_s}. Each controller receives "
        "requests, validates input, calls services to do the work, and formats responses. "
        "Think of these as traffic cops directing requests to the right place.",
    ),
    DescriptionRule(
        "routers", r"router|route",
        "Route definitions mapping {files} URL path{files_s} to handler functions. When a "
        "request comes in, these routes determine which code should handle it based on the "
        "URL and HTTP method (GET, POST, etc.). This is the entry point for all API calls.",
    ),
    DescriptionRule(
        "constants", r"constants?",
        "Constants and configuration values used throughout the app. Includes {files} "
        "file{files_s} with fixed values like API keys, status codes, error messages, and "
        "feature flags. Centralizing these makes them easy to update and prevents typos.",
    ),
    DescriptionRule(
        "validators", r"validator",
        "Validation rules ensuring {files} data type{files_s} meet requirements before "
        "processing. These check things like email format, password strength, required "
        "fields, and data ranges. Catching invalid data early prevents bugs and security "
        "issues.",
    ),
    DescriptionRule(
        "auth", r"auth",
        "Authentication and authorization logic managing user access. Handles {files} "
        "aspect{files_s} of security like login, signup, password resets, token generation, "
        "and permission checking. This is the gatekeeper ensuring only authorized users "
        "access protected resources.",
    ),
    DescriptionRule(
        "layout", r"layout",
        "Layout components defining {files} page template{files_s} used across the app. These "
        "provide consistent structure like headers, footers, navigation, and sidebars. Every "
        "page wraps itself in a layout to maintain uniform design.",
    ),
    DescriptionRule(
        "state", r"store|state",
        "State management handling {files} global data store{files_s}. This manages "
        "application-wide state that needs to be accessed from multiple components, like user "
        "info, theme settings, or shopping cart contents. Centralizing state prevents "
        "prop-drilling and keeps data synchronized.",
    ),
]

GENERIC_TEMPLATE = "Module organizing {files} {name}-related file{files_s}{sub} for the project. {scale}"
GENERIC_SUB = " across {subdirs} subdirectories"
SCALE_SMALL = "Small, focused module - good starting point for understanding this functionality."
SCALE_LARGE = "Larger module with multiple files working together to provide comprehensive functionality."
SCALE_EMPTY = "Contains core functionality that other parts of the app depend on."

TYPESCRIPT_EXTS = {"ts", "tsx"}
JAVASCRIPT_EXTS = {"js", "jsx"}
STYLE_EXTS = {"css", "scss", "sass"}
CONFIG_EXTS = {"json", "toml", "yaml", "yml"}

CRITICAL_SUBDIR = r"api|auth|database|config|core|main|index"
SUBDIR_CLAUSES = [
    (r"test|spec|__tests__", " Includes test coverage."),
    (r"utils?|helpers?|lib", " Provides utility functions."),
    (r"types?|interfaces?", " Defines TypeScript types."),
]


def _search(pattern: str, text: str) -> bool:
    return re.search(pattern, text, re.IGNORECASE) is not None


def classify_type(name: str) -> str:
    lower = name.lower()
    for rule in TYPE_RULES:
        if _search(rule.pattern, lower):
            return rule.type
    return SERVICE


def match_description_rule(name: str) -> Optional[DescriptionRule]:
    for rule in DESCRIPTION_RULES:
        if _search(rule.pattern, name):
            return rule
    return None


def describe(name: str, file_count: int, subdir_count: int) -> str:
    fmt = {
        "files": file_count,
        "files_s": "s" if file_count > 1 else "",
        "subdirs": subdir_count,
        "subdirs_s": "s" if subdir_count > 1 else "",
        "name": name,
    }
    rule = match_description_rule(name)
    if rule is not None:
        sub = rule.sub_template.format(**fmt) if subdir_count > 0 else ""
        return rule.template.format(sub=sub, **fmt)

    if 0 < file_count <= 3:
        scale = SCALE_SMALL
    elif file_count > 3:
        scale = SCALE_LARGE
    else:
        scale = SCALE_EMPTY
    sub = GENERIC_SUB.format(**fmt) if subdir_count > 0 else ""
    return GENERIC_TEMPLATE.format(sub=sub, scale=scale, **fmt)


def tech_clause(extensions: Sequence[str], file_count: int) -> str:
    exts = set(extensions)
    text = ""
    if exts & TYPESCRIPT_EXTS:
        text = " Built with TypeScript for type safety."
    elif exts & JAVASCRIPT_EXTS:
        text = " Written in JavaScript."
    if exts & STYLE_EXTS:
        text += " Includes styling definitions."
    if "sql" in exts:
        text += " Contains database schemas and migrations."
    if "md" in exts:
        text += " Includes documentation."
    if exts & CONFIG_EXTS and file_count < 10:
        text += " Primarily configuration files."
    return text


def size_clause(name: str, file_count: int, subdir_count: int) -> str:
    if file_count > 20:
        return f"\n\nLarge module with {file_count} files - explore subdirectories first for navigation."
    if 0 < file_count <= 5 and subdir_count == 0:
        return f"\n\nCompact module - good entry point for understanding {name} functionality."
    return ""


def role_clause(name: str, depth: int, parent_name: str, sibling_names: Sequence[str]) -> str:
    if depth <= 1 or not parent_name:
        return ""
    text = f"\n\nPart of {parent_name} module."
    if _search(r"client|frontend", name) and any(_search(r"server|backend", s) for s in sibling_names):
        text += " Handles client-side logic (runs in browser with limited permissions)."
    elif _search(r"server|backend", name) and any(_search(r"client|frontend", s) for s in sibling_names):
        text += " Handles server-side logic (full system access, database connections)."
    elif _search(r"shared|common", name):
        text += " Shared code used by multiple modules."
    return text


def subdir_clause(subdir_names: Sequence[str]) -> str:
    if not subdir_names:
        return ""
    text = ""
    critical = [s for s in subdir_names if _search(CRITICAL_SUBDIR, s)]
    if critical:
        text = f"\n\nCritical subdirectories: {', '.join(critical[:3])}."
    for pattern, clause in SUBDIR_CLAUSES:
        if any(_search(pattern, s) for s in subdir_names):
            text += clause
    return text


def classify_directory(
    name: str,
    *,
    file_count: int,
    extensions: Sequence[str],
    subdir_names: Sequence[str],
    sibling_names: Sequence[str],
    parent_name: str,
    depth: int,
) -> Classification:
    """Classify one directory from its name and immediate surroundings."""
    if depth == 0:
        return Classification(type=SERVICE, description=ROOT_DESCRIPTION, context="")

    node_type = classify_type(name)
    base = describe(name, file_count, len(subdir_names))
    context = role_clause(name, depth, parent_name, sibling_names) + subdir_clause(subdir_names)
    description = (
        base
        + tech_clause(extensions, file_count)
        + size_clause(name, file_count, len(subdir_names))
        + context
    )
    return Classification(type=node_type, description=description, context=context)


def classify_node(tree: DirectoryTree, node: DirectoryNode) -> Classification:
    parent_name = ""
    if node.depth > 0:
        parent_name = node.parent_path.rsplit("/", 1)[-1] or "root"
    return classify_directory(
        node.name,
        file_count=len(node.files),
        extensions=sorted(node.extension_histogram()),
        subdir_names=node.subdir_names,
        sibling_names=siblings(tree, node.path),
        parent_name=parent_name,
        depth=node.depth,
    )


def classify_tree(tree: DirectoryTree) -> Dict[str, Classification]:
    return {path: classify_node(tree, node) for path, node in tree.items()}
