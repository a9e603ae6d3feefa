#!/usr/bin/env python
"""
Populate the profile cache from the directory's user list.

Fetches every page of active users and upserts them as partial profiles.
Full details are fetched lazily the first time each profile is requested.

Usage:
    python populate_cache.py                  # Whole list (or INTRA_CAMPUS_ID)
    python populate_cache.py --campus-id 9    # One campus
    python populate_cache.py --max-pages 3    # Smoke run
"""

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.table import Table

from api.dependencies import ServiceContainer
from modules.population.models import PopulationReport
from shared.exceptions import PeerdexError

console = Console()


def render_report(report: PopulationReport) -> Table:
    """Summary table for a finished run."""
    table = Table(title="Cache Population")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Pages fetched", str(report.pages_fetched))
    table.add_row("Users seen", str(report.users_seen))
    table.add_row("Active users", str(report.active_users))
    table.add_row("Records written", f"[green]{report.records_written}[/green]")
    failed_style = "red" if report.records_failed else "dim"
    table.add_row("Records failed", f"[{failed_style}]{report.records_failed}[/{failed_style}]")
    table.add_row(
        "Batches",
        f"{report.batches_written} written / {report.batches_failed} failed",
    )
    if report.finished_at:
        elapsed = (report.finished_at - report.started_at).total_seconds()
        table.add_row("Elapsed", f"{elapsed:.1f}s")
    return table


async def populate(campus_id: int | None, max_pages: int | None) -> PopulationReport:
    """Run one population job with a fresh container."""
    container = ServiceContainer()
    try:
        return await container.populator(campus_id=campus_id).run(max_pages=max_pages)
    finally:
        await container.aclose()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Populate the profile cache from the 42 intra user list"
    )
    parser.add_argument(
        "--campus-id",
        type=int,
        help="Only users whose primary campus is this id (default: INTRA_CAMPUS_ID)",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        help="Stop after this many list pages",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log per-page progress",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    console.print("[bold]Peerdex cache population[/bold]")

    try:
        report = asyncio.run(populate(args.campus_id, args.max_pages))
    except PeerdexError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        sys.exit(1)

    console.print(render_report(report))
    if not report.complete:
        console.print("[yellow]Some batches failed; rerun to fill the gaps.[/yellow]")


if __name__ == "__main__":
    main()
