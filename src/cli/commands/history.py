"""Version history CLI command."""

import sys

import click
from rich.console import Console
from rich.table import Table

from cli.utils import get_components, short
from versioning import current_version_from_history

console = Console()


@click.command()
@click.argument("target_id")
@click.option("-n", "--limit", default=20, help="Max versions to show")
@click.option("--checks", "show_checks", is_flag=True, help="Also show recent check runs")
def history(target_id: str, limit: int, show_checks: bool):
    """Show stored versions of a target."""
    c = get_components()
    store = c["store"]
    target = store.get_target(target_id)
    if target is None:
        console.print(f"[red]Target {target_id} not found[/]")
        sys.exit(1)

    records = store.list_versions(target_id, limit=limit)
    current = current_version_from_history(records)

    console.print(f"\n[bold]{target.name}[/] current: [green]{target.current_version or '-'}[/]")
    if not records:
        console.print("[yellow]No versions stored yet.[/]")
    else:
        table = Table(show_header=True)
        table.add_column("Version", style="green")
        table.add_column("Date")
        table.add_column("Type")
        table.add_column("Score", justify="right")
        table.add_column("Status")
        table.add_column("Notes", style="dim")
        for r in records:
            if r.requires_manual_review:
                status = "[yellow]review[/]"
            elif current is not None and r.id == current.id:
                status = "[green]current[/]"
                if r.is_current_override:
                    status = "[green]current (pinned)[/]"
            else:
                status = "verified" if r.newsletter_verified else ""
            table.add_row(
                r.version,
                r.release_date or "",
                str(r.type),
                str(r.confidence_score),
                status,
                short(r.notes, 50),
            )
        console.print(table)

    if show_checks:
        checks = store.recent_checks(target_id, limit=10)
        table = Table(show_header=True, title="Recent checks")
        table.add_column("When", style="dim")
        table.add_column("Result")
        table.add_column("Found", justify="right")
        table.add_column("Added", justify="right")
        table.add_column("Error", style="dim")
        for ch in checks:
            table.add_row(
                (ch["checked_at"] or "")[:19],
                "[green]ok[/]" if ch["success"] else "[red]failed[/]",
                str(ch["versions_found"]),
                str(ch["versions_added"]),
                short(ch["error"], 50),
            )
        console.print(table)
