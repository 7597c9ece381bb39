"""
Splitting narrative text back into titled sections.
"""

import re
from typing import List, Tuple

HEADER_RE = re.compile(r"^\*\*(.+?)\*\*:\s*$")


def split_sections(text: str) -> List[Tuple[str, str]]:
    """
    Split text on lines of the form "**Title**:" into (title, body) pairs.

    Text before the first header is dropped. Bodies are stripped of
    surrounding blank lines.
    """
    sections: List[Tuple[str, List[str]]] = []
    for line in (text or "").split("\n"):
        match = HEADER_RE.match(line.strip())
        if match:
            sections.append((match.group(1).strip(), []))
        elif sections:
            sections[-1][1].append(line)
    return [(title, "\n".join(body).strip()) for title, body in sections]
