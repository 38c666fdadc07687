"""
Ingestion CLI Commands
======================

CLI commands for running and scheduling the province/unit crawl.
"""

from __future__ import annotations

import asyncio
import signal
from typing import Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from vn_admin.core.errors import IngestionCancelled, PipelineError
from vn_admin.core.logging import configure_logging
from vn_admin.core.settings import get_settings
from vn_admin.ingestion.jobs import enqueue_crawl, get_job_status, run_ingestion
from vn_admin.ingestion.pipeline import IngestionReport
from vn_admin.ingestion.source import get_default_source_config

console = Console()
ingest_app = typer.Typer(help="Ingestion pipeline commands")


async def _run_until_signalled() -> IngestionReport:
    """Run the pipeline; SIGINT/SIGTERM request a cooperative stop."""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
        except NotImplementedError:
            # Windows event loops do not support signal handlers
            pass
    return await run_ingestion(cancel_event)


@ingest_app.command("run")
def run_crawl(
    log_file: str = typer.Option("logs/crawler.log", "--log-file", help="Log file path"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """
    Crawl all provinces and their units into the database.

    Safe to re-run: existing rows are updated in place.

    Examples:
        vn-admin ingest run
        vn-admin ingest run --debug --log-file=/tmp/crawl.log
    """
    settings = get_settings()
    configure_logging(settings.log_file or log_file, debug or settings.debug)

    rprint("\n[bold]Starting crawl[/bold]")
    rprint("[dim]Press Ctrl+C to stop after the current province[/dim]\n")

    try:
        report = asyncio.run(_run_until_signalled())
    except PipelineError as e:
        rprint(f"\n[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except IngestionCancelled as e:
        rprint("\n[yellow]Crawl cancelled; rows written so far are kept[/yellow]")
        if e.report:
            _display_report(e.report.to_dict())
        raise typer.Exit(130)

    _display_report(report.to_dict())


@ingest_app.command("enqueue")
def enqueue() -> None:
    """
    Queue a crawl for the background worker.

    Examples:
        vn-admin ingest enqueue
    """
    try:
        job_id = asyncio.run(enqueue_crawl())
    except Exception as e:
        rprint(f"\n[red]Error:[/red] Failed to enqueue job: {e}")
        rprint("\nMake sure Redis is running and REDIS_URL is set")
        raise typer.Exit(1)

    rprint("\n[green]Job enqueued successfully![/green]")
    rprint(f"Job ID: [bold]{job_id}[/bold]")
    rprint("\nCheck status with:")
    rprint(f"  vn-admin ingest status {job_id}")


@ingest_app.command("worker")
def start_worker(
    burst: bool = typer.Option(False, "--burst", help="Run in burst mode (exit when queue empty)"),
) -> None:
    """
    Start the ingestion worker.

    Set CRAWL_CRON_HOUR to also re-crawl every night at that hour.

    Examples:
        vn-admin ingest worker
        vn-admin ingest worker --burst
    """
    from arq import run_worker

    from vn_admin.ingestion.jobs import WorkerSettings, get_cron_jobs, get_redis_settings

    settings = get_settings()
    configure_logging(settings.log_file, settings.debug)
    rprint("[bold]Starting ingestion worker...[/bold]")
    rprint("Press Ctrl+C to stop\n")

    try:
        # Read the queue location and schedule now, after .env has been loaded
        run_worker(
            WorkerSettings,
            burst=burst,
            redis_settings=get_redis_settings(),
            cron_jobs=get_cron_jobs(),
        )
    except Exception as e:
        rprint(f"[red]Error:[/red] Worker failed: {e}")
        rprint("\nMake sure Redis is running and REDIS_URL is set")
        raise typer.Exit(1)


@ingest_app.command("status")
def job_status(
    job_id: str = typer.Argument(..., help="Job ID to check"),
) -> None:
    """
    Check the status of a queued crawl.

    Examples:
        vn-admin ingest status abc123
    """
    try:
        result = asyncio.run(get_job_status(job_id))
    except Exception as e:
        rprint(f"[red]Error:[/red] Failed to get job status: {e}")
        rprint("\nMake sure Redis is running")
        raise typer.Exit(1)

    if result is None:
        rprint(f"[yellow]Job '{job_id}' not found[/yellow]")
        raise typer.Exit(1)

    rprint(f"\n[bold]Job: {job_id}[/bold]")
    rprint(f"  Status: {result.get('status', 'unknown')}")
    if isinstance(result.get("result"), dict):
        _display_report(result["result"])


@ingest_app.command("source")
def show_source(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a source YAML file"),
) -> None:
    """
    Show the remote source configuration.

    Examples:
        vn-admin ingest source
        vn-admin ingest source --config=config/source.yaml
    """
    try:
        source = get_default_source_config(config or get_settings().source_config)
    except FileNotFoundError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Remote Source")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    table.add_row("Provinces URL", source.provinces_url)
    table.add_row("Units URL", source.units_url)
    table.add_row("Origin", source.origin)
    table.add_row("Referer", source.referer)
    table.add_row("Timeout", f"{source.request_timeout:g}s")
    table.add_row("Politeness delay", f"{source.politeness_delay:g}s")
    table.add_row("Max attempts", str(source.retry.max_attempts))
    table.add_row("Backoff base", f"{source.retry.base_delay:g}s")
    table.add_row("Cookie", "[green]set[/green]" if get_settings().api_cookie else "[yellow]not set[/yellow]")
    console.print(table)


def _display_report(result: dict) -> None:
    """Display a crawl report."""
    status = result.get("status", "unknown")
    status_color = {
        "completed": "green",
        "running": "blue",
        "cancelled": "yellow",
        "failed": "red",
    }.get(status, "white")

    rprint("\n[bold]Results:[/bold]")
    rprint(f"  Status: [{status_color}]{status}[/{status_color}]")
    if result.get("duration_seconds"):
        rprint(f"  Duration: {result['duration_seconds']:.1f}s")

    rprint("\n[bold]Statistics:[/bold]")
    rprint(f"  Provinces found: {result.get('provinces_found', 0)}")
    rprint(f"  Provinces saved: {result.get('provinces_saved', 0)}")
    rprint(f"  Provinces skipped: {result.get('provinces_skipped', 0)}")
    rprint(f"  Units saved: {result.get('units_saved', 0)}")
    rprint(f"  Units failed: {result.get('units_failed', 0)}")

    errors = result.get("errors", [])
    if errors:
        rprint(f"\n[bold red]Errors ({len(errors)}):[/bold red]")
        for error in errors[:10]:  # Show first 10
            rprint(f"  • {error}")
        if len(errors) > 10:
            rprint(f"  ... and {len(errors) - 10} more")
