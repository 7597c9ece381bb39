"""
README feature extraction.
"""

import re
from dataclasses import dataclass, field
from typing import List, Tuple

PURPOSE_LINES = 15
MAX_FEATURES = 8

BULLET_RE = re.compile(r"^[\-\*]\s+")

# Each family is tested independently; several may co-occur.
TECH_FAMILIES: List[Tuple[str, str]] = [
    ("React/Frontend", r"react|next\.?js|vue|angular"),
    ("Node.js", r"node\.?js|express|fastify"),
    ("Python", r"python|django|flask|fastapi"),
    ("Database", r"postgres|mysql|mongodb|redis"),
    ("Containers", r"docker|kubernetes|k8s"),
    ("AI/LLM", r"gpt|openai|llm|\bai\b|anthropic|claude"),
    ("Backend-as-a-Service", r"supabase|firebase"),
]


@dataclass
class ReadmeContext:
    purpose: str = ""                                   # first lines, lower-cased, joined
    features: List[str] = field(default_factory=list)   # bullet lines
    tech_stack: List[str] = field(default_factory=list)
    keywords: str = ""                                  # full text, lower-cased

    @property
    def use_case(self) -> str:
        """First sentence of the purpose when it is a reasonable length."""
        if not self.purpose:
            return ""
        snippet = self.purpose.split(".")[0].strip()
        if 20 < len(snippet) < 200:
            return snippet
        return ""


def extract_readme_context(text: str) -> ReadmeContext:
    if not text:
        return ReadmeContext()

    lower = text.lower()
    lines = [line for line in text.split("\n") if line.strip()]
    purpose = " ".join(lines[:PURPOSE_LINES]).lower()

    features = [
        BULLET_RE.sub("", line).strip()
        for line in lines
        if BULLET_RE.match(line)
    ][:MAX_FEATURES]

    tech_stack = [name for name, pattern in TECH_FAMILIES if re.search(pattern, lower)]

    return ReadmeContext(purpose=purpose, features=features, tech_stack=tech_stack, keywords=lower)
