"""Manual review CLI commands."""

import sys

import click
from rich.console import Console
from rich.table import Table

from checks.errors import TargetNotFoundError, VersionConflictError
from cli.utils import get_components, short

console = Console()


@click.group()
def review():
    """Review versions flagged during checks."""
    pass


@review.command("list")
@click.option("-n", "--limit", default=20, help="Max records to show")
def review_list(limit: int):
    """Show versions awaiting review."""
    c = get_components()
    records = c["review"].pending(limit=limit)
    if not records:
        console.print("[green]Nothing to review.[/]")
        return

    names = {t.id: t.name for t in c["store"].list_targets()}
    table = Table(show_header=True)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Target", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Date")
    table.add_column("Score", justify="right")
    table.add_column("Why", style="yellow")

    for r in records:
        table.add_row(
            str(r.id),
            names.get(r.software_id, r.software_id),
            r.version,
            r.release_date or "",
            str(r.confidence_score),
            short(r.validation_notes, 70),
        )
    console.print(table)


@review.command("approve")
@click.argument("record_id", type=int)
def review_approve(record_id: int):
    """Approve a flagged version as-is."""
    c = get_components()
    try:
        record = c["review"].approve(record_id)
    except TargetNotFoundError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)
    console.print(f"[green]Approved:[/] {record.version}")


@review.command("edit")
@click.argument("record_id", type=int)
@click.option("--version", "version", help="Corrected version string")
@click.option("--date", "release_date", help="Corrected release date (YYYY-MM-DD)")
@click.option("--notes", help="Replacement release notes (Markdown)")
def review_edit(record_id: int, version: str, release_date: str, notes: str):
    """Correct a flagged version and approve it."""
    c = get_components()
    try:
        record = c["review"].edit_and_approve(
            record_id, version=version, release_date=release_date, notes=notes
        )
    except (TargetNotFoundError, VersionConflictError) as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)
    console.print(f"[green]Saved and approved:[/] {record.version}")


@review.command("override")
@click.argument("record_id", type=int)
def review_override(record_id: int):
    """Pin a version as its target's current one."""
    c = get_components()
    try:
        record = c["review"].set_current_override(record_id)
    except TargetNotFoundError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)
    console.print(f"[green]Pinned current version:[/] {record.version}")


@review.command("reject")
@click.argument("record_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def review_reject(record_id: int, yes: bool):
    """Delete a wrongly extracted version."""
    c = get_components()
    if not yes and not click.confirm(f"Delete version record {record_id}?"):
        console.print("[yellow]Cancelled.[/]")
        return
    try:
        c["review"].reject(record_id)
    except TargetNotFoundError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)
    console.print(f"[green]Rejected[/] record {record_id}")
