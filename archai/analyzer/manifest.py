from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from .errors import InputFormatError
from .models import API, DATABASE, LLM, SERVICE, ServiceDescriptor

logger = logging.getLogger(__name__)

MANIFEST_NAMES = [
    "docker-compose.yml",
    "docker-compose.yaml",
    "compose.yml",
    "compose.yaml",
]

# First matching row wins
SERVICE_TYPE_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("postgres", "mysql", "mongo", "redis", "db"), DATABASE),
    (("api", "gateway"), API),
    (("ai", "llm", "ml"), LLM),
]


def classify_service(name: str) -> str:
    lower = name.lower()
    for tokens, node_type in SERVICE_TYPE_RULES:
        if any(tok in lower for tok in tokens):
            return node_type
    return SERVICE


def find_manifest(paths: Iterable[str]) -> Optional[str]:
    """Return the shallowest compose manifest path in a file listing."""
    best: Optional[str] = None
    best_depth = 0
    for p in paths:
        name = p.rsplit("/", 1)[-1]
        if name not in MANIFEST_NAMES:
            continue
        depth = p.count("/")
        if best is None or depth < best_depth:
            best, best_depth = p, depth
    return best


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [str(k) for k in value.keys()]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _env_keys(value: Any) -> List[str]:
    if isinstance(value, dict):
        return [str(k) for k in value.keys()]
    keys = []
    for item in _as_list(value):
        key = item.split("=", 1)[0].strip()
        if key:
            keys.append(key)
    return keys


def _build_context(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        ctx = value.get("context")
        return str(ctx) if ctx is not None else None
    if value is None:
        return None
    return str(value)


def parse_manifest(text: str) -> List[ServiceDescriptor]:
    """
    Parse compose-style manifest text into service descriptors, in file order.
    Raises InputFormatError when there is no top-level services mapping.
    """
    try:
        data = yaml.safe_load(text or "")
    except yaml.YAMLError as e:
        raise InputFormatError(f"manifest is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise InputFormatError("manifest must be a mapping with a top-level 'services' key")
    services = data.get("services")
    if not isinstance(services, dict):
        raise InputFormatError("manifest has no top-level 'services' mapping")

    result: List[ServiceDescriptor] = []
    for name, svc in services.items():
        cfg: Dict[str, Any] = svc if isinstance(svc, dict) else {}
        image = cfg.get("image")
        result.append(
            ServiceDescriptor(
                name=str(name),
                image=str(image) if image is not None else None,
                build=_build_context(cfg.get("build")),
                ports=_as_list(cfg.get("ports")),
                depends_on=_as_list(cfg.get("depends_on")),
                environment=_env_keys(cfg.get("environment")),
            )
        )
    logger.debug(f"Parsed {len(result)} services from manifest")
    return result


def describe_service(svc: ServiceDescriptor) -> str:
    ports = ", ".join(svc.ports) if svc.ports else "none"
    return f"Service: {svc.name}. Image: {svc.image or 'custom build'}. Ports: {ports}"
