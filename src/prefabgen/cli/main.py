"""prefabgen CLI for generating prefab manifests from Storybook stories."""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import Settings, load_settings
from ..errors import DiscoveryError, StoryFileError
from ..extractor.service import StoryExtractor
from ..logs import configure_logging
from ..manifest.builder import ManifestBuilder
from ..models.records import Diagnostic, PropertyDescriptor

console = Console()
app = typer.Typer(add_completion=False, no_args_is_help=True)


def _resolve_settings(
    config_path: Optional[Path],
    root: Optional[Path],
    components_dir: Optional[str],
    output: Optional[Path],
    workers: Optional[int],
) -> Settings:
    settings = load_settings(config_path)
    if root:
        settings.root = Path(root).expanduser().resolve()
    if components_dir:
        settings.components_dir = components_dir
    if output:
        settings.output_path = Path(output).expanduser()
    if workers:
        settings.workers = max(1, workers)
    return settings


def _format_value(prop: PropertyDescriptor) -> str:
    if not prop.has_default:
        return ""
    return json.dumps(prop.default_value, ensure_ascii=False)


def _props_table(title: str, props: List[PropertyDescriptor]) -> Table:
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Default")
    table.add_column("List")
    table.add_column("Description")
    for prop in props:
        table.add_row(
            prop.name,
            prop.type,
            _format_value(prop),
            "yes" if prop.is_list else "",
            prop.description or "",
        )
    return table


def _print_diagnostics(diagnostics: List[Diagnostic]) -> None:
    console.print(f"[yellow bold]{len(diagnostics)} diagnostics[/yellow bold]")
    for diagnostic in diagnostics:
        location = str(diagnostic.path)
        if diagnostic.line:
            location = f"{location}:{diagnostic.line}"
        console.print(
            f"  [yellow]{diagnostic.kind}[/yellow] {escape(location)}: {escape(diagnostic.message)}"
        )


@app.command()
def generate(
    root: Optional[Path] = typer.Option(None, "--root", "-r", help="Project root"),
    components_dir: Optional[str] = typer.Option(
        None, "--components-dir", help="Components directory name under the root"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Manifest output path"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to prefabgen.yaml"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Parallel workers"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Generate wmprefab.config.json from the components directory."""
    configure_logging(verbose)
    settings = _resolve_settings(config, root, components_dir, output, workers)

    builder = ManifestBuilder(settings)
    try:
        result = builder.generate()
    except DiscoveryError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)

    table = Table(title="Components")
    table.add_column("Name", style="cyan")
    table.add_column("Display Name")
    table.add_column("Module")
    table.add_column("Props")
    for component in result.manifest.components:
        table.add_row(
            component.name,
            component.display_name,
            component.include[0] if component.include else "",
            str(len(component.props)),
        )
    console.print(table)

    if result.diagnostics:
        _print_diagnostics(result.diagnostics)

    console.print(
        f"Wrote [bold]{settings.resolved_output_path()}[/bold] "
        f"({len(result.manifest.components)} of {len(result.story_files)} story files)"
    )


@app.command()
def inspect(
    story: Path = typer.Argument(..., help="Story file to extract props from"),
    as_json: bool = typer.Option(False, "--json", help="Print props as JSON"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to prefabgen.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Show the props extracted from a single story file."""
    configure_logging(verbose)
    settings = load_settings(config)
    extractor = StoryExtractor(meta_identifier=settings.meta_identifier)
    try:
        result = extractor.extract(story)
    except StoryFileError as exc:
        location = f"{exc.path}:{exc.line}" if exc.line else str(exc.path)
        console.print(f"[red]{type(exc).__name__}[/red] {escape(location)}: {escape(exc.message)}")
        raise typer.Exit(1)

    if as_json:
        payload = [prop.to_dict() for prop in result.properties]
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if not result.properties:
        console.print(f"[yellow]No props documented in {story}[/yellow]")
        return
    console.print(_props_table(f"Props in {story.name} ({result.variant})", result.properties))
