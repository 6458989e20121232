"""Tracked target CLI commands."""

import sys

import click
from rich.console import Console
from rich.table import Table

from checks.errors import PersistenceError
from cli.utils import get_components

console = Console()


@click.group()
def targets():
    """Manage tracked software."""
    pass


@targets.command("add")
@click.argument("name")
@click.option("--url", "version_check_url", help="Release-notes page to check")
@click.option("--website", default="", help="Vendor website")
@click.option("--current", "current_version", help="Known current version")
@click.option("--id", "target_id", help="Explicit id (default: generated)")
def targets_add(name, version_check_url, website, current_version, target_id):
    """Start tracking a product."""
    c = get_components()
    try:
        target = c["store"].add_target(
            name,
            version_check_url=version_check_url,
            website=website,
            current_version=current_version,
            target_id=target_id,
        )
    except PersistenceError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)
    console.print(f"[green]Added:[/] {target.name} ({target.id})")


@targets.command("list")
def targets_list():
    """List tracked products."""
    c = get_components()
    rows = c["store"].list_targets()
    if not rows:
        console.print("[yellow]No targets yet.[/]")
        return

    table = Table(show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Current", style="green")
    table.add_column("Released")
    table.add_column("Last checked", style="dim")
    table.add_column("URL", style="blue")

    for t in rows:
        table.add_row(
            t.id,
            t.name,
            t.current_version or "-",
            t.release_date or "",
            (t.last_checked or "never")[:19],
            t.version_check_url or "",
        )
    console.print(table)
