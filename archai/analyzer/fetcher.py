from __future__ import annotations

import logging
import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import requests

from .errors import ExternalServiceError
from .manifest import find_manifest
from .models import PathEntry
from .tree import filter_ignored

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
USER_AGENT = "Archai-CodeSight"
GITHUB_URL_RE = re.compile(r"(?:https?://)?(?:www\.)?github\.com/([^/\s]+)/([^/\s#?]+)")

MAX_FILES = 50_000


@dataclass
class RepositorySnapshot:
    """Everything the analyzer needs from a remote repository."""
    owner: str
    name: str
    html_url: str
    default_branch: str
    entries: List[PathEntry] = field(default_factory=list)
    readme: str = ""
    description: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class ArchiveListing:
    file_name: str
    paths: List[str]
    manifest_path: Optional[str] = None
    manifest_text: Optional[str] = None


def parse_github_url(url: str) -> Tuple[str, str]:
    match = GITHUB_URL_RE.search(url or "")
    if not match:
        raise ValueError("Invalid GitHub URL. Please use format: https://github.com/username/repository")
    owner, repo = match.group(1), match.group(2)
    return owner, re.sub(r"\.git$", "", repo)


def _headers(token: Optional[str], raw: bool = False) -> dict:
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/vnd.github.v3.raw" if raw else "application/vnd.github+json",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _get(url: str, token: Optional[str], timeout: float, raw: bool = False) -> requests.Response:
    try:
        response = requests.get(url, headers=_headers(token, raw), timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise ExternalServiceError(f"Unable to connect to GitHub: {e}") from e

    if response.status_code == 404:
        raise ExternalServiceError(
            "Repository not found. Please check the URL and ensure it's public.", status_code=404
        )
    if response.status_code in (403, 429):
        raise ExternalServiceError(
            "GitHub API rate limit reached. Please try again in a few minutes.", status_code=429
        )
    if not response.ok:
        raise ExternalServiceError(
            f"GitHub API error: {response.status_code} {response.reason}", status_code=response.status_code
        )
    return response


def fetch_readme(owner: str, repo: str, token: Optional[str] = None, timeout: float = 15.0) -> str:
    """Raw README text, or empty string when it cannot be fetched."""
    try:
        return _get(f"{GITHUB_API}/repos/{owner}/{repo}/readme", token, timeout, raw=True).text
    except ExternalServiceError as e:
        logger.warning(f"README unavailable for {owner}/{repo}: {e}")
        return ""


def fetch_repository(url: str, token: Optional[str] = None, timeout: float = 15.0) -> RepositorySnapshot:
    """
    Fetch repository metadata, the recursive tree of the default branch and
    the README. Raises ExternalServiceError on any host failure except a
    missing README.
    """
    owner, repo = parse_github_url(url)
    logger.debug(f"Fetching {owner}/{repo} from GitHub")

    info = _get(f"{GITHUB_API}/repos/{owner}/{repo}", token, timeout).json()
    branch = info.get("default_branch") or "main"
    tree = _get(f"{GITHUB_API}/repos/{owner}/{repo}/git/trees/{branch}?recursive=1", token, timeout).json()
    if tree.get("truncated"):
        logger.warning(f"GitHub truncated the tree listing for {owner}/{repo}")

    entries = [
        PathEntry(path=item["path"], type=item.get("type", "blob"))
        for item in tree.get("tree", [])
        if item.get("path")
    ]
    return RepositorySnapshot(
        owner=owner,
        name=info.get("name") or repo,
        html_url=info.get("html_url") or f"https://github.com/{owner}/{repo}",
        default_branch=branch,
        entries=entries,
        readme=fetch_readme(owner, repo, token, timeout),
        description=info.get("description") or "",
    )


def _single_top_dir(names: List[str]) -> Optional[str]:
    heads = {n.split("/", 1)[0] for n in names}
    if len(heads) == 1 and all("/" in n for n in names):
        return heads.pop() + "/"
    return None


def list_archive(zip_path: str | Path, file_name: Optional[str] = None) -> ArchiveListing:
    """
    List the files of a zip archive. A single shared top-level directory
    (GitHub zipball layout) is stripped, and the shallowest compose manifest
    is read when present.
    """
    zip_path = Path(zip_path)
    with zipfile.ZipFile(zip_path, "r") as zf:
        names = [i.filename for i in zf.infolist() if not i.is_dir()][:MAX_FILES]
        prefix = _single_top_dir(names)
        paths = [n[len(prefix):] if prefix else n for n in names]
        paths = filter_ignored(paths)

        manifest_path = find_manifest(paths)
        manifest_text = None
        if manifest_path is not None:
            member = (prefix or "") + manifest_path
            manifest_text = zf.read(member).decode("utf-8", errors="ignore")
            logger.debug(f"Found manifest {manifest_path} in {zip_path.name}")

    return ArchiveListing(
        file_name=file_name or zip_path.name,
        paths=paths,
        manifest_path=manifest_path,
        manifest_text=manifest_text,
    )


def list_directory(root: str | Path) -> ArchiveListing:
    """Same as list_archive, for a local checkout."""
    root = Path(root).resolve()
    paths = sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())
    paths = filter_ignored(paths)[:MAX_FILES]
    manifest_path = find_manifest(paths)
    manifest_text = None
    if manifest_path is not None:
        manifest_text = (root / manifest_path).read_text(encoding="utf-8", errors="ignore")
    return ArchiveListing(file_name=root.name, paths=paths, manifest_path=manifest_path, manifest_text=manifest_text)
