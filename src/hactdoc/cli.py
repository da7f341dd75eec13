import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from hactdoc import __version__
from hactdoc.config import load_extract_config
from hactdoc.errors import HactDocError
from hactdoc.extract import extract_documentation
from hactdoc.hierarchy import Hierarchy
from hactdoc.models import Entity

app = typer.Typer(
    help="HactDoc - extract //! and /*! documentation from C++ sources",
    no_args_is_help=True,
)

console = Console()

FILES_ARGUMENT = typer.Argument(..., help="Source files, in parsing order (headers first)")
CONFIG_OPTION = typer.Option(
    None, "--config", "-c", help="Project root holding the .hactdoc file (defaults to cwd)"
)


def _build_hierarchy(files: list[Path], project_root: Path | None) -> Hierarchy:
    """Parse files into a hierarchy, mapping failures to exit codes."""
    try:
        config = load_extract_config(project_root)
        return extract_documentation(files, config)
    except (HactDocError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)


def _label(entity: Entity) -> str:
    name = escape(entity.name) if entity.name else "[italic](text)[/italic]"
    kind = entity.kind.value if entity.kind else "text"
    sources = "; ".join(str(location) for location in entity.locations)
    return f"[bold]{name}[/bold] [dim]({kind}; from '{escape(sources)}')[/dim]"


def _add_branches(tree: Tree, entity: Entity) -> None:
    for child in entity.children:
        _add_branches(tree.add(_label(child)), child)


@app.command()
def tree(
    files: list[Path] = FILES_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
):
    """Print the documentation hierarchy as a tree.

    Args:
        files: Source files to parse, in order
        config: Project root holding the .hactdoc file
    """
    hierarchy = _build_hierarchy(files, config)

    root = Tree("[bold]Hierarchy[/bold]")
    _add_branches(root, hierarchy.root)
    console.print(root)


@app.command()
def index(
    files: list[Path] = FILES_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
):
    """List the names of the top-level entities, one per line.

    Args:
        files: Source files to parse, in order
        config: Project root holding the .hactdoc file
    """
    hierarchy = _build_hierarchy(files, config)

    for name in hierarchy.top_level_names():
        typer.echo(name)


@app.command()
def dump(
    files: list[Path] = FILES_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
):
    """Print the full documentation hierarchy as JSON.

    Args:
        files: Source files to parse, in order
        config: Project root holding the .hactdoc file
    """
    hierarchy = _build_hierarchy(files, config)

    typer.echo(json.dumps(hierarchy.to_dict(), indent=2))


@app.command()
def show(
    files: list[Path] = FILES_ARGUMENT,
    entity: str = typer.Option(..., "--entity", "-e", help="Dot-separated path, e.g. Outer.Inner"),
    config: Optional[Path] = CONFIG_OPTION,
):
    """Print one entity (and its children) as JSON.

    Args:
        files: Source files to parse, in order
        entity: Dot-separated path of the entity from the root

    Examples:
        hactdoc show src/audio.h src/audio.cpp --entity Hact.Audio
    """
    hierarchy = _build_hierarchy(files, config)

    try:
        found = hierarchy.find(entity)
    except HactDocError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(json.dumps(found.to_dict(), indent=2))


def _version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"hactdoc version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Log parsing progress and placement decisions",
    )):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
