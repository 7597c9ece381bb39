"""
Runtime settings read from the environment.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .analyzer.layout import MAX_DEPTH

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT_S = 15.0
DEFAULT_LOG_LEVEL = "WARNING"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Invalid {name}={raw!r}, using {default}")
        return default
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid {name}={raw!r}, using {default}")
        return default
    if value < 0:
        logger.warning(f"Invalid {name}={raw!r}, using {default}")
        return default
    return value


@dataclass
class Settings:
    insights_provider: str = "heuristic"
    insights_model: Optional[str] = None
    github_token: Optional[str] = None
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    max_depth: int = MAX_DEPTH
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            insights_provider=os.getenv("ARCHAI_INSIGHTS_PROVIDER") or "heuristic",
            insights_model=os.getenv("ARCHAI_INSIGHTS_MODEL") or None,
            github_token=os.getenv("GITHUB_TOKEN") or None,
            http_timeout_s=_env_float("ARCHAI_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_S),
            max_depth=_env_int("ARCHAI_MAX_DEPTH", MAX_DEPTH),
            log_level=(os.getenv("ARCHAI_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )
