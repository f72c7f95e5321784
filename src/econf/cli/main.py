"""CLI application using Typer for the conference service."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config.settings import settings
from ..core.models import Paper
from ..dashboard import general_stats
from ..papers.listing import newest_first
from ..reviewer.status import decision_label, summarize
from ..store import PAPERS, DocumentStore, SqliteStore, create_store
from ..users import list_reviewers
from ..utils.logging import get_logger
from ..web.app import start_server as _start_web_server

app = typer.Typer(
    name="econf",
    help="e-Conference - paper submission and review management",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


def _open_store(db: Optional[Path]) -> DocumentStore:
    if db is not None:
        return SqliteStore(db)
    return create_store(settings)


@app.command()
def serve(
    host: str = typer.Option(
        "127.0.0.1",
        "--host",
        help="Hostname to bind the web server to.",
    ),
    port: int = typer.Option(
        8000,
        "--port",
        help="Port for the web server.",
    ),
    reload: bool = typer.Option(
        False,
        "--reload/--no-reload",
        help="Enable auto-reload (development only).",
    ),
) -> None:
    """Start the API server.

    The document store is chosen by ``STORE_BACKEND`` / ``STORE_PATH``.
    Use ``--reload`` in development to auto-restart on code changes.
    """
    console.print(f"[bold blue]Starting API server[/bold blue] at http://{host}:{port}")
    console.print(f"Store backend: {settings.store_backend}")
    try:
        _start_web_server(host=host, port=port, reload=reload)
    except Exception as exc:
        logger.error(f"Failed to start web server: {exc}")
        raise typer.Exit(1)


@app.command()
def summary(
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite store to read (default: configured store)"),
) -> None:
    """Show platform-wide totals."""
    with _open_store(db) as store:
        stats = general_stats(store)

    table = Table(title="Platform Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_row("Conferences", str(stats.total_conferences))
    table.add_row("Papers", str(stats.total_papers))
    table.add_row("Organizers", str(stats.total_organizers))
    table.add_row("Authors", str(stats.total_authors))
    table.add_row("Reviewers", str(stats.total_reviewers))
    table.add_row("Users", str(stats.total_users), style="bold")
    console.print(table)


@app.command()
def reviewers(
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite store to read (default: configured store)"),
) -> None:
    """List the reviewer pool used for automatic assignment."""
    with _open_store(db) as store:
        pool = list_reviewers(store)

    if not pool:
        console.print("[yellow]No reviewers registered[/yellow]")
        return

    table = Table(title=f"Reviewers ({len(pool)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    for reviewer in pool:
        table.add_row(reviewer.id, reviewer.name)
    console.print(table)


@app.command()
def papers(
    conference: Optional[str] = typer.Option(None, "--conference", "-c", help="Only papers of this conference ID"),
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite store to read (default: configured store)"),
) -> None:
    """List papers with their overall review decision."""
    with _open_store(db) as store:
        if conference:
            snapshots = store.where(PAPERS, "conferenceId", "==", conference)
        else:
            snapshots = store.stream(PAPERS)
        listed = newest_first([Paper.from_snapshot(s) for s in snapshots])

    if not listed:
        console.print("[yellow]No papers found[/yellow]")
        return

    table = Table(title=f"Papers ({len(listed)})")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Reviewers", justify="right")
    table.add_column("Decision", style="green")
    for paper in listed:
        decision = summarize(paper.assigned_statuses())
        table.add_row(paper.id, paper.title, str(len(paper.reviewer_ids)), decision_label(decision))
    console.print(table)


if __name__ == "__main__":
    app()
