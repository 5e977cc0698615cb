"""Protojump CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from protojump import __version__
from protojump.config import load_config
from protojump.index import ProtoIndex

if TYPE_CHECKING:
    from protojump.builder import BuildResult
    from protojump.models import Definition
    from protojump.watcher import FileEvent

_PROJECT_OPTION = click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)


@click.group()
@click.version_option(version=__version__, prog_name="protojump")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """Protojump - jump from generated code to proto definitions."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    _configure_logging(logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING)


def _configure_logging(level: int) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    pkg_logger = logging.getLogger("protojump")
    pkg_logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in pkg_logger.handlers):
        # Console resolves sys.stderr on each write.
        handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
        pkg_logger.addHandler(handler)


def _open_index(
    project: Path | None, *, use_cache: bool = True
) -> tuple[Path, ProtoIndex, BuildResult]:
    """Build a ready-to-query index for *project* (cwd by default)."""
    project_root = project or Path.cwd()
    config = load_config(project_root)
    proto_index = ProtoIndex.from_config(project_root, config, use_cache=use_cache)
    result = proto_index.initialize()
    return project_root, proto_index, result


def _location(definition: Definition) -> str:
    # Editors count columns from 1.
    return f"{definition.file_path}:{definition.line}:{definition.column + 1}"


def _echo_definition(definition: Definition, *, output_json: bool) -> None:
    if output_json:
        click.echo(json.dumps(definition.to_dict(), ensure_ascii=False, indent=2))
        return
    package = f" ({definition.package_name})" if definition.package_name else ""
    click.echo(f"{definition.kind} {definition.name}{package}")
    click.echo(f"  {_location(definition)}")


@main.command()
@_PROJECT_OPTION
@click.option("--no-cache", is_flag=True, default=False, help="Ignore and do not write the cache.")
def index(*, project: Path | None, no_cache: bool) -> None:
    """Build (or refresh) the proto index and save the cache."""
    _root, proto_index, result = _open_index(project, use_cache=not no_cache)
    stats = proto_index.stats()
    proto_index.dispose()

    click.echo(f"Files:       {stats.file_count}")
    click.echo(f"Definitions: {stats.definition_count}")
    click.echo(f"Aliases:     {stats.alias_count}")
    if result.errors:
        click.echo("")
        for err in result.errors:
            click.echo(f"  [ERR] {err}")


@main.command()
@click.argument("name")
@_PROJECT_OPTION
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def find(name: str, *, project: Path | None, output_json: bool) -> None:
    """Find the message or enum NAME."""
    _root, proto_index, _result = _open_index(project)
    definition = proto_index.find_definition(name)
    proto_index.dispose()
    if definition is None:
        click.echo(f"Error: no definition named '{name}'.", err=True)
        sys.exit(1)
    _echo_definition(definition, output_json=output_json)


@main.command("enum")
@click.argument("enum_name")
@click.argument("value_name")
@_PROJECT_OPTION
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def enum_cmd(enum_name: str, value_name: str, *, project: Path | None, output_json: bool) -> None:
    """Find VALUE_NAME inside enum ENUM_NAME."""
    _root, proto_index, _result = _open_index(project)
    definition = proto_index.find_enum_value_definition(enum_name, value_name)
    proto_index.dispose()
    if definition is None:
        click.echo(f"Error: no enum named '{enum_name}'.", err=True)
        sys.exit(1)
    _echo_definition(definition, output_json=output_json)


@main.command()
@click.argument("identifier")
@_PROJECT_OPTION
@click.option("--hover", "hover", default=None, help="Editor hover text for IDENTIFIER.")
@click.option(
    "--target",
    default=None,
    help="File the identifier is defined in; must be a generated file.",
)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def goto(
    identifier: str,
    *,
    project: Path | None,
    hover: str | None,
    target: str | None,
    output_json: bool,
) -> None:
    """Resolve a generated-code IDENTIFIER to its proto declaration."""
    from protojump.symbols import (
        classify_hover,
        is_exported_identifier,
        is_generated_file,
        lookup_symbol,
    )

    if not is_exported_identifier(identifier):
        click.echo(f"Error: '{identifier}' is not an exported identifier.", err=True)
        sys.exit(1)

    project_root = project or Path.cwd()
    config = load_config(project_root)
    if target is not None and not is_generated_file(target, config.file_suffixes):
        click.echo(f"Error: '{target}' is not a generated file.", err=True)
        sys.exit(1)

    category = classify_hover(hover, identifier) if hover else "unknown"
    _root, proto_index, _result = _open_index(project_root)
    definition = lookup_symbol(proto_index, identifier, category)
    proto_index.dispose()
    if definition is None:
        click.echo(f"Error: no proto definition for '{identifier}'.", err=True)
        sys.exit(1)
    _echo_definition(definition, output_json=output_json)


@main.command()
@_PROJECT_OPTION
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def stats(*, project: Path | None, output_json: bool) -> None:
    """Show index statistics."""
    project_root, proto_index, _result = _open_index(project)
    counts = proto_index.stats()
    proto_index.dispose()

    if output_json:
        click.echo(json.dumps(counts.to_dict(), indent=2))
        return

    from rich.console import Console
    from rich.table import Table

    console = Console()
    table = Table(title=f"Proto index: {project_root}", show_header=False, box=None)
    table.add_column("metric", style="cyan")
    table.add_column("count", justify="right")
    table.add_row("Files", str(counts.file_count))
    table.add_row("Definitions", str(counts.definition_count))
    table.add_row("Aliases", str(counts.alias_count))
    console.print(table)


@main.command()
@_PROJECT_OPTION
def clear(*, project: Path | None) -> None:
    """Delete the saved index cache."""
    project_root = project or Path.cwd()
    cache_path = load_config(project_root).cache_path(project_root)
    if not cache_path.exists():
        click.echo("No cache to clear.")
        return
    cache_path.unlink()
    click.echo(f"Removed {cache_path}")


@main.command("watch")
@click.option("--debounce", default=None, type=int, help="Debounce delay in ms.")
@_PROJECT_OPTION
def watch_cmd(*, debounce: int | None, project: Path | None) -> None:
    """Keep the index current while proto files change."""
    from rich.console import Console

    from protojump.watcher import watch

    project_root = project or Path.cwd()
    config = load_config(project_root)
    _root, proto_index, _result = _open_index(project_root)
    console = Console()

    counts = proto_index.stats()
    console.print(
        f"[bold blue]Indexed:[/bold blue] {counts.file_count} files, "
        f"{counts.definition_count} definitions"
    )
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    def _report(event: FileEvent, changed: bool) -> None:
        marker = "[green]updated[/green]" if changed else "[dim]unchanged[/dim]"
        console.print(f"{event.kind:8s} {event.path} {marker}")

    try:
        watch(
            proto_index,
            debounce_ms=debounce if debounce is not None else config.debounce_ms,
            callback=_report,
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Watch stopped.[/yellow]")
    finally:
        proto_index.dispose()
