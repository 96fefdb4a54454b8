"""Typer-based CLI for rendering and searching call graphs from session files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table as RichTable

from . import __version__, config
from .config_manager import clear_render_config, load_config, save_render_config
from .graph_export import export_graph
from .graph_model import SearchResult
from .languages import LANGUAGES
from .models import SymbolKind
from .session import SessionError, build_generator, load_session

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="🕸️  callgraph-cli: turn LSP call hierarchies into DOT and Mermaid diagrams.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    help="⚙️  Configuration: render defaults.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"callgraph-cli v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log resolution details."),
):
    """callgraph-cli: render call graphs collected from a language server."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _open_generator(session_file: Path, lang: Optional[str] = None, root: Optional[str] = None):
    try:
        session = load_session(session_file)
    except SessionError as exc:
        err_console.print(f"[red]❌ {exc}[/red]")
        raise typer.Exit(code=1)
    defaults = load_config()
    if root is None and not session.root and defaults["root"]:
        root = defaults["root"]
    if lang is None and session.language == "default":
        lang = defaults["language"]
    return build_generator(session, lang=lang, root=root)


@app.command("render")
def render(
    session_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Session JSON file."),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: dot, mermaid or json."),
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Language strategy (overrides the session)."),
    root: Optional[str] = typer.Option(None, "--root", "-r", help="Project root for relative cluster titles."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout."),
):
    """Render a session as Graphviz DOT, Mermaid or structured JSON."""
    fmt = (fmt or load_config()["format"]).lower()
    if fmt not in config.OUTPUT_FORMATS:
        raise typer.BadParameter(f"Format must be one of: {', '.join(config.OUTPUT_FORMATS)}")

    generator = _open_generator(session_file, lang=lang, root=root)
    if fmt == "dot":
        source = generator.generate_dot_source()
    elif fmt == "mermaid":
        source = generator.generate_mermaid_source()
    else:
        source = json.dumps(generator.generate_graph().to_dict(), indent=2) + "\n"

    if output is None:
        typer.echo(source, nl=False)
        return
    export_graph(source, output)
    typer.echo(f"Exported {fmt} graph to {output}")


def _print_results(results: List[SearchResult], title: str) -> None:
    if not results:
        typer.echo("No matching symbols.")
        return
    table = RichTable(title=title)
    table.add_column("Symbol", style="bold")
    table.add_column("Kind")
    table.add_column("Location")
    for item in results:
        start = item.range.start
        table.add_row(
            item.symbol_name,
            item.symbol_kind.name.lower(),
            f"{item.file_path}:{start.line + 1}:{start.character + 1}",
        )
    console.print(table)


@app.command("search")
def search(
    session_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Session JSON file."),
    query: str = typer.Argument(..., help="Substring of the symbol name."),
    case_sensitive: bool = typer.Option(False, "--case-sensitive", "-c", help="Match case exactly."),
):
    """Find symbols whose name contains QUERY."""
    graph = _open_generator(session_file).generate_graph()
    _print_results(graph.search_symbols(query, case_sensitive), f"Symbols matching '{query}'")


@app.command("files")
def files(
    session_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Session JSON file."),
    query: str = typer.Argument("", help="Substring of the file path."),
    case_sensitive: bool = typer.Option(False, "--case-sensitive", "-c", help="Match case exactly."),
):
    """List files whose path contains QUERY."""
    graph = _open_generator(session_file).generate_graph()
    results = graph.search_files(query, case_sensitive)
    if not results:
        typer.echo("No matching files.")
        return
    for item in results:
        typer.echo(f"{item.file_id:>4}  {item.file_path}")


@app.command("kinds")
def kinds(
    session_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Session JSON file."),
    kind: str = typer.Argument(..., help="Symbol kind name (e.g. function) or LSP number."),
):
    """List symbols of one kind."""
    try:
        symbol_kind = SymbolKind.parse(kind)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    graph = _open_generator(session_file).generate_graph()
    _print_results(graph.search_by_symbol_kind(symbol_kind), f"{symbol_kind.name.lower()} symbols")


@app.command("languages")
def languages():
    """List the available language strategies."""
    for name, cls in LANGUAGES.items():
        typer.echo(f"{name:<16} {cls.name}")


# ===================================================================
# Configuration
# ===================================================================

@config_app.command("show")
def config_show():
    """Print the effective render defaults."""
    for key, value in load_config().items():
        typer.echo(f"{key} = {value!r}")


@config_app.command("set")
def config_set(
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Default language strategy."),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Default output format."),
    root: Optional[str] = typer.Option(None, "--root", "-r", help="Default project root."),
):
    """Persist render defaults to the config file."""
    if fmt is not None and fmt.lower() not in config.OUTPUT_FORMATS:
        raise typer.BadParameter(f"Format must be one of: {', '.join(config.OUTPUT_FORMATS)}")
    if lang is not None and lang.lower() not in LANGUAGES:
        raise typer.BadParameter(f"Unknown language strategy: {lang}")
    if not save_render_config(language=lang, format=fmt.lower() if fmt else None, root=root):
        err_console.print(f"[red]❌ Could not write {config.CONFIG_FILE}[/red]")
        raise typer.Exit(code=1)
    typer.echo(f"Saved render defaults to {config.CONFIG_FILE}")


@config_app.command("reset")
def config_reset():
    """Drop saved render defaults."""
    if not clear_render_config():
        err_console.print(f"[red]❌ Could not write {config.CONFIG_FILE}[/red]")
        raise typer.Exit(code=1)
    typer.echo("Render defaults reset.")


if __name__ == "__main__":
    app()
