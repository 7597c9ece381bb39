"""Main CLI entrypoint for Archai."""

import json
import logging
import sys
import zipfile
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click

from ..analyzer import analyze_archive, analyze_manifest, analyze_repository, demo_graph
from ..analyzer.errors import ArchaiError, ExternalServiceError, InputFormatError
from ..analyzer.fetcher import GITHUB_URL_RE, fetch_repository, list_archive, list_directory
from ..analyzer.models import ArchitectureGraph
from ..analyzer.report import emit_report
from ..config import Settings
from ..narrative import generate_insights

logger = logging.getLogger(__name__)

README_NAMES = ["README.md", "README.rst", "README.txt", "README"]


@click.group()
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, output_json, verbose):
    """Archai - infer a repository's architecture and explain it."""
    settings = Settings.from_env()
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj['json'] = output_json
    ctx.obj['settings'] = settings


def _json_output(data: Dict[str, Any]) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=2))


def _human_output(message: str) -> None:
    """Output human-readable message."""
    if not click.get_current_context().obj.get('json', False):
        click.echo(message)


def _fail(message: str, code: int = 1) -> None:
    if click.get_current_context().obj.get('json', False):
        _json_output({'error': message})
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(code)


def _local_readme(root: Path) -> str:
    for name in README_NAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate.read_text(encoding="utf-8", errors="ignore")
    return ""


def _load_source(source: str, settings: Settings) -> Tuple[ArchitectureGraph, str, str, str]:
    """Route SOURCE to the right pipeline. Returns (graph, readme, description, name)."""
    path = Path(source)
    if not path.exists() and GITHUB_URL_RE.search(source):
        snapshot = fetch_repository(source, token=settings.github_token, timeout=settings.http_timeout_s)
        graph = analyze_repository(
            snapshot.entries,
            snapshot.name,
            default_branch=snapshot.default_branch,
            html_url=snapshot.html_url,
            max_depth=settings.max_depth,
        )
        return graph, snapshot.readme, snapshot.description, snapshot.name

    if not path.exists():
        raise click.BadParameter(f"{source} is neither a GitHub URL nor an existing path", param_hint="SOURCE")

    if path.is_dir():
        listing = list_directory(path)
        graph = analyze_archive(
            listing.paths, listing.file_name, listing.manifest_text, max_depth=settings.max_depth
        )
        return graph, _local_readme(path), "", listing.file_name

    if path.suffix.lower() == ".zip":
        listing = list_archive(path)
        graph = analyze_archive(
            listing.paths, listing.file_name, listing.manifest_text, max_depth=settings.max_depth
        )
        return graph, "", "", Path(listing.file_name).stem

    text = path.read_text(encoding="utf-8", errors="ignore")
    return analyze_manifest(text, path.name), "", "", path.stem


def _print_graph_summary(graph: ArchitectureGraph) -> None:
    _human_output(f"Components: {len(graph.nodes)}")
    _human_output(f"Connections: {len(graph.edges)}")
    for node in graph.nodes:
        deps = f" -> {', '.join(node.dependencies)}" if node.dependencies else ""
        _human_output(f"  [{node.type}] {node.label}{deps}")


@main.command()
@click.argument('source')
@click.option('--readme', 'readme_file', type=click.Path(exists=True, dir_okay=False), help='README file to use')
@click.option('--out', 'out_dir', type=click.Path(file_okay=False), help='Write graph.json (and insights.md) here')
@click.option('--insights', 'with_insights', is_flag=True, help='Generate the onboarding narrative')
@click.option('--provider', help='Insights provider (heuristic, openai, anthropic)')
@click.pass_context
def analyze(ctx, source, readme_file, out_dir, with_insights, provider):
    """Analyze a zip archive, compose file, local directory or GitHub URL."""
    settings: Settings = ctx.obj['settings']
    try:
        graph, readme, description, name = _load_source(source, settings)
    except InputFormatError as e:
        _fail(f"Invalid manifest: {e}", 2)
    except ExternalServiceError as e:
        _fail(str(e))
    except zipfile.BadZipFile as e:
        _fail(f"Invalid archive: {e}", 2)
    except ValueError as e:
        _fail(str(e), 2)

    if readme_file:
        readme = Path(readme_file).read_text(encoding="utf-8", errors="ignore")

    insights: Optional[str] = None
    if with_insights:
        insights = generate_insights(
            graph,
            readme=readme,
            description=description,
            repo_name=name,
            provider=provider or settings.insights_provider,
            model=settings.insights_model,
            timeout_s=settings.http_timeout_s,
        )

    if out_dir:
        emit_report(graph, out_dir, insights)
        logger.debug(f"Report written to {out_dir}")

    if ctx.obj['json']:
        payload: Dict[str, Any] = {'name': name, 'graph': graph.to_dict()}
        if insights is not None:
            payload['insights'] = insights
        _json_output(payload)
        return

    _human_output(f"Architecture of {name}")
    _print_graph_summary(graph)
    if out_dir:
        _human_output(f"Report written to {out_dir}")
    if insights is not None:
        _human_output("")
        _human_output(insights)


@main.command()
@click.argument('graph_json', type=click.Path(exists=True, dir_okay=False))
@click.option('--readme', 'readme_file', type=click.Path(exists=True, dir_okay=False), help='README file to use')
@click.option('--description', default='', help='Short repository description')
@click.option('--name', 'repo_name', default='', help='Repository display name')
@click.option('--provider', help='Insights provider (heuristic, openai, anthropic)')
@click.pass_context
def insights(ctx, graph_json, readme_file, description, repo_name, provider):
    """Generate the onboarding narrative for a saved graph."""
    settings: Settings = ctx.obj['settings']
    try:
        graph = ArchitectureGraph.from_json(Path(graph_json).read_text(encoding="utf-8"))
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        _fail(f"Invalid graph file: {e}", 2)

    readme = Path(readme_file).read_text(encoding="utf-8", errors="ignore") if readme_file else ""
    text = generate_insights(
        graph,
        readme=readme,
        description=description,
        repo_name=repo_name,
        provider=provider or settings.insights_provider,
        model=settings.insights_model,
        timeout_s=settings.http_timeout_s,
    )

    if ctx.obj['json']:
        _json_output({'insights': text})
    else:
        click.echo(text)


@main.command()
@click.pass_context
def demo(ctx):
    """Show the built-in example architecture."""
    graph = demo_graph()
    if ctx.obj['json']:
        _json_output(graph.to_dict())
    else:
        _print_graph_summary(graph)


if __name__ == '__main__':
    try:
        main()
    except ArchaiError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
