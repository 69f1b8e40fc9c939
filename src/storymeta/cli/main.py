"""storymeta CLI - Main entry point.

Provides commands for extracting a Storybook story catalog and for
querying the extracted catalog.

Exit codes:
    0: Success
    1: No stories extracted / nothing found
    2: Configuration error
    3: Runtime error
"""

import asyncio
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from .. import __version__
from ..config import StorymetaSettings
from ..exceptions import ConfigError
from ..extraction import ExtractionContext, ExtractionMode, run_extraction
from ..extraction.live import detect_dev_server_port
from ..logging import setup_logging as configure_logging
from ..models import Catalog
from ..query import (
    catalog_stats,
    component_detail,
    component_docs,
    component_examples,
    filter_stories,
    list_components,
    search_stories,
)
from ..store import CatalogLoader
from .formatters import format_json, format_outcome, stories_payload

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_RUNTIME_ERROR = 3


def setup_logging(verbose: bool = False, settings: StorymetaSettings | None = None) -> None:
    """Configure logging for CLI.

    Args:
        verbose: Enable debug logging
        settings: Settings supplying the default log level
    """
    level = "DEBUG" if verbose else (settings.effective_log_level if settings else "WARNING")
    configure_logging(level=level, colorize=sys.stderr.isatty())


def load_settings(**overrides: Any) -> StorymetaSettings:
    """Build settings from the environment plus non-empty CLI overrides.

    Exits with EXIT_CONFIG_ERROR when a value is invalid.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return StorymetaSettings(**values)
    except ValidationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


def load_catalog(project_root: str | None, output_dir: str | None) -> Catalog:
    """Load the extracted catalog, exiting with EXIT_EXECUTION_FAILED when there is none."""
    settings = load_settings(project_root=project_root, output_dir=output_dir)
    catalog = CatalogLoader.from_settings(settings).load()
    if catalog is None:
        click.echo(
            "Error: No catalog found. Run `storymeta extract` first.",
            err=True,
        )
        sys.exit(EXIT_EXECUTION_FAILED)
    return catalog


def catalog_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by the commands that read an extracted catalog."""
    func = click.option(
        "--output-dir",
        type=click.Path(file_okay=False),
        help="Built Storybook directory holding stories.json",
    )(func)
    func = click.option(
        "--project-root",
        type=click.Path(exists=True, file_okay=False),
        help="Storybook project root",
    )(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="storymeta")
@click.pass_context
def main(ctx: click.Context) -> None:
    """storymeta - Storybook component metadata extraction.

    Extract a story catalog from source files, a built Storybook, or a
    running dev server, then query it.
    """
    ctx.ensure_object(dict)


@main.command()
@click.option(
    "--mode",
    type=click.Choice([mode.value for mode in ExtractionMode]),
    default=ExtractionMode.DEV.value,
    show_default=True,
    help="dev: source files, built index, then live server; build: built index only",
)
@click.option("--enhance", is_flag=True, help="After a build run, upgrade with dev-mode data")
@click.option("--url", help="Storybook dev server URL")
@click.option("--port", type=int, help="Storybook dev server port")
@click.option("--project-root", type=click.Path(file_okay=False), help="Storybook project root")
@click.option("--source-dir", type=click.Path(file_okay=False), help="Directory with story files")
@click.option("--output-dir", type=click.Path(file_okay=False), help="Built Storybook directory")
@click.option("--output", "-o", "output", type=click.Path(dir_okay=False), help="Catalog file")
@click.option("--no-source", is_flag=True, help="Skip static source file parsing")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def extract(
    mode: str,
    enhance: bool,
    url: str | None,
    port: int | None,
    project_root: str | None,
    source_dir: str | None,
    output_dir: str | None,
    output: str | None,
    no_source: bool,
    verbose: bool,
) -> None:
    """Extract the story catalog and write it to disk."""
    settings = load_settings(
        url=url,
        port=port,
        project_root=project_root,
        source_dir=source_dir,
        output_dir=output_dir,
    )
    setup_logging(verbose, settings)

    extraction_mode = ExtractionMode(mode)
    output_path = Path(output).resolve() if output else settings.output_path

    try:
        context = ExtractionContext.from_settings(settings, use_source=not no_source)
        needs_server = extraction_mode is ExtractionMode.DEV or enhance
        if needs_server and not ({"url", "port"} & settings.model_fields_set):
            detected = asyncio.run(detect_dev_server_port(timeout=settings.probe_timeout))
            context.server_url = f"http://localhost:{detected}" if detected else None

        outcome = asyncio.run(
            run_extraction(
                context,
                mode=extraction_mode,
                enhance=enhance,
                output_path=output_path,
                run_timeout=settings.run_timeout,
            )
        )
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except OSError as e:
        click.echo(f"Runtime error: {e}", err=True)
        sys.exit(EXIT_RUNTIME_ERROR)

    click.echo(format_outcome(outcome, str(output_path) if outcome.succeeded else None))
    if not outcome.succeeded:
        click.echo(
            "Hint: start Storybook (npm run storybook) or build it (npm run build-storybook).",
            err=True,
        )
        sys.exit(EXIT_EXECUTION_FAILED)
    sys.exit(EXIT_SUCCESS)


@main.command("detect-port")
@click.option("--host", default="localhost", show_default=True, help="Host to probe")
@click.option("--timeout", type=float, default=1.0, show_default=True, help="Per-port timeout")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def detect_port(host: str, timeout: float, verbose: bool) -> None:
    """Find the port a Storybook dev server is listening on."""
    setup_logging(verbose)

    detected = asyncio.run(detect_dev_server_port(host=host, timeout=timeout))
    if detected is None:
        click.echo("No Storybook dev server found", err=True)
        sys.exit(EXIT_EXECUTION_FAILED)
    click.echo(str(detected))


@main.command()
@catalog_options
def stats(project_root: str | None, output_dir: str | None) -> None:
    """Show catalog statistics."""
    catalog = load_catalog(project_root, output_dir)
    click.echo(format_json(catalog_stats(catalog)))


@main.command()
@catalog_options
def components(project_root: str | None, output_dir: str | None) -> None:
    """List components with their stories."""
    catalog = load_catalog(project_root, output_dir)
    found = list_components(catalog)
    click.echo(format_json({"total": len(found), "components": found}))


@main.command()
@click.argument("query")
@catalog_options
def search(query: str, project_root: str | None, output_dir: str | None) -> None:
    """Search stories by title, name, tags or id.

    QUERY: Case-insensitive search text
    """
    catalog = load_catalog(project_root, output_dir)
    try:
        results = search_stories(catalog, query)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="QUERY") from e
    click.echo(
        format_json(
            {"query": query.strip(), "total": len(results), "results": stories_payload(results)}
        )
    )


@main.command()
@click.option("--title", help="Title substring (case-insensitive)")
@click.option("--tag", help="Exact tag")
@click.option("--kind", help="Kind substring (case-insensitive)")
@catalog_options
def stories(
    title: str | None,
    tag: str | None,
    kind: str | None,
    project_root: str | None,
    output_dir: str | None,
) -> None:
    """List stories, optionally filtered."""
    catalog = load_catalog(project_root, output_dir)
    found = filter_stories(catalog, title=title, tag=tag, kind=kind)
    click.echo(
        format_json(
            {
                "total": len(found),
                "filtered": bool(title or tag or kind),
                "stories": stories_payload(found),
                "metadata": {
                    "generatedAt": catalog.generated_at_iso,
                    "extractedFrom": catalog.extracted_from.value,
                },
            }
        )
    )


@main.command()
@click.argument("component_id")
@click.option("--docs", "view", flag_value="docs", help="Show component documentation")
@click.option("--examples", "view", flag_value="examples", help="Show usage examples")
@catalog_options
def show(
    component_id: str,
    view: str | None,
    project_root: str | None,
    output_dir: str | None,
) -> None:
    """Show one component.

    COMPONENT_ID: Component id as listed by `storymeta components`
    """
    catalog = load_catalog(project_root, output_dir)
    if view == "docs":
        data = component_docs(catalog, component_id)
    elif view == "examples":
        data = component_examples(catalog, component_id)
    else:
        data = component_detail(catalog, component_id)

    if data is None:
        click.echo(f"Error: Component '{component_id}' not found", err=True)
        sys.exit(EXIT_EXECUTION_FAILED)
    click.echo(format_json(data))


if __name__ == "__main__":
    main()
