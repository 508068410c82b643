"""Command-line interface for the tab tracker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .config import DEFAULT_STORAGE_KEY, TrackerSettings
from .paths import get_db_path, get_log_path

app = typer.Typer(help="Track how long each browser tab address stays active.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the API."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the API."
    ),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the activity SQLite database."
    ),
    tick_seconds: float = typer.Option(
        1.0,
        "--tick",
        min=0.1,
        help="Seconds between live duration updates.",
    ),
    key: str = typer.Option(
        DEFAULT_STORAGE_KEY, "--key", help="Record key the summary is stored under."
    ),
) -> None:
    """Run the tracker behind a local HTTP API until interrupted."""
    from .server_runner import run_server

    file_handler = logging.FileHandler(get_log_path(), encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(file_handler)

    settings = TrackerSettings.from_intervals(tick_seconds=tick_seconds, storage_key=key)
    run_server(
        host=host,
        port=port,
        db_path=db_path or get_db_path(),
        settings=settings,
    )


@app.command()
def summary(
    db_path: Optional[Path] = typer.Option(
        None,
        "--db",
        path_type=Path,
        help="Location of the activity SQLite database.",
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", min=1, help="Show only the top N addresses."
    ),
    key: str = typer.Option(
        DEFAULT_STORAGE_KEY, "--key", help="Record key the summary is stored under."
    ),
) -> None:
    """Print the accumulated time per address, longest first."""
    from .reporting import SummaryPrinter

    summary_printer = SummaryPrinter(db_path=db_path or get_db_path(), key=key)
    summary_printer.print_summary(limit=limit)


@app.command()
def clear(
    db_path: Optional[Path] = typer.Option(
        None,
        "--db",
        path_type=Path,
        help="Location of the activity SQLite database.",
    ),
    key: str = typer.Option(
        DEFAULT_STORAGE_KEY, "--key", help="Record key the summary is stored under."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Reset the stored summary to empty."""
    from .storage import SqliteSummaryStore

    if not yes:
        typer.confirm("Clear all recorded activity?", abort=True)
    SqliteSummaryStore(db_path or get_db_path(), key=key).save({})
    typer.echo("Activity cleared.")
