"""geoffload CLI - typer application entry point."""

from __future__ import annotations

import atexit
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from geoffload.observability import close_file_logging, configure_logging, get_logger

if TYPE_CHECKING:
    from geoffload.config import LoaderConfig
    from geoffload.graph import Subgraph

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="geoffload",
    help="geoffload: Read Geoff graph notation and load it into a graph store.",
    no_args_is_help=True,
)
console = Console()
log = get_logger(__name__)

# Reads the document from stdin
STDIN_PATH = Path("-")


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_dir: Annotated[
        Path | None,
        typer.Option(
            "--log",
            help="Enable file logging to the given directory (debug.jsonl).",
        ),
    ] = None,
) -> None:
    """geoffload: Read Geoff graph notation and load it into a graph store."""
    configure_logging(verbosity=verbose, log_to_file=log_dir is not None, log_dir=log_dir)
    if log_dir is not None:
        atexit.register(close_file_logging)


def _load_settings(config_path: Path | None) -> LoaderConfig:
    from geoffload.config import ConfigError, load_config

    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def _read_document(path: Path, encoding: str) -> Subgraph:
    """Parse the first document in *path* (``-`` for stdin).

    Raises:
        typer.Exit: If the file is missing or the document does not parse.
    """
    from geoffload.geoff import GeoffReader, GeoffReaderError

    try:
        if path == STDIN_PATH:
            return GeoffReader(sys.stdin).read_subgraph()
        with path.open("r", encoding=encoding) as f:
            return GeoffReader(f).read_subgraph()
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] File not found: {escape(str(path))}")
        raise typer.Exit(1) from None
    except GeoffReaderError as e:
        log.debug("parse_failed", path=str(path), error=str(e))
        console.print(f"[red]Parse error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def _print_summary(subgraph: Subgraph) -> None:
    nodes = Table(title=f"Nodes ({subgraph.order})")
    nodes.add_column("Name")
    nodes.add_column("Labels")
    nodes.add_column("Properties", justify="right")
    nodes.add_column("Hook")
    for name in sorted(subgraph.named_nodes()):
        node = subgraph.nodes[name]
        hook = node.hook.render() if node.hook is not None else ""
        nodes.add_row(name, ", ".join(sorted(node.labels)), str(len(node.properties)), hook)
    console.print(nodes)

    unnamed = subgraph.order - len(subgraph.named_nodes())
    if unnamed:
        console.print(f"[dim]+ {unnamed} unnamed node(s)[/dim]")

    rels = Table(title=f"Relationships ({subgraph.size})")
    rels.add_column("Start")
    rels.add_column("Type")
    rels.add_column("End")
    rels.add_column("Properties", justify="right")
    for rel in subgraph.relationships:
        start = rel.start if subgraph.nodes[rel.start].named else "(unnamed)"
        end = rel.end if subgraph.nodes[rel.end].named else "(unnamed)"
        rels.add_row(start, rel.type, end, str(len(rel.properties)))
    console.print(rels)

    for comment in subgraph.comments:
        console.print(f"[dim]/* {comment} */[/dim]")


@app.command()
def parse(
    file: Annotated[Path, typer.Argument(help="Geoff file to parse ('-' for stdin).")],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the parsed document as JSON."),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config file (default: ./geoffload.yaml)."),
    ] = None,
) -> None:
    """Parse a Geoff document and show what it declares."""
    settings = _load_settings(config)
    subgraph = _read_document(file, settings.encoding)

    if as_json:
        from geoffload.graph import export_subgraph

        print(export_subgraph(subgraph).model_dump_json(indent=2))
        return

    _print_summary(subgraph)


@app.command()
def load(
    file: Annotated[Path, typer.Argument(help="Geoff file to load ('-' for stdin).")],
    database: Annotated[
        Path | None,
        typer.Option(
            "--database",
            "-d",
            help="SQLite database to load into (default from config, else ./graph.db).",
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config file (default: ./geoffload.yaml)."),
    ] = None,
) -> None:
    """Load a Geoff document into a SQLite entity store.

    The whole document is loaded in one transaction.
    """
    from geoffload.graph import GraphLoader, SqliteEntityStore

    settings = _load_settings(config)
    db_path = database or settings.database
    subgraph = _read_document(file, settings.encoding)

    db_path.parent.mkdir(parents=True, exist_ok=True)
    store = SqliteEntityStore(db_path)
    try:
        with store.transaction():
            named = GraphLoader(store).load(subgraph)
    finally:
        store.close()

    table = Table(title=f"Loaded into {db_path}")
    table.add_column("Name")
    table.add_column("Entity", justify="right")
    for name in sorted(named):
        table.add_row(name, str(named[name]))
    console.print(table)
    console.print(
        f"[green]✓[/green] {subgraph.order} node(s), {subgraph.size} relationship(s) processed"
    )


@app.command()
def version() -> None:
    """Show version information."""
    from geoffload import __version__

    console.print(f"geoffload v{__version__}")
