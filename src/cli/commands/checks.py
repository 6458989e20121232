"""Version check CLI commands."""

import asyncio
import sys

import click
from rich.console import Console
from rich.table import Table

from checks.errors import ConfigError, RateLimitedError, TargetNotFoundError
from checks.models import CheckResult
from cli.utils import build_orchestrator, get_components, short

console = Console()


def _results_table(results: list[CheckResult]) -> Table:
    table = Table(show_header=True)
    table.add_column("Target", style="cyan")
    table.add_column("Status")
    table.add_column("Found", justify="right")
    table.add_column("Added", justify="right", style="green")
    table.add_column("Score", justify="right")
    table.add_column("Review")
    table.add_column("Error", style="dim")

    for r in results:
        status = "[green]ok[/]" if r.success else f"[red]{r.state}[/]"
        table.add_row(
            r.name,
            status,
            str(r.versions_found),
            str(r.versions_added),
            "" if r.score is None else str(r.score),
            "[yellow]yes[/]" if r.requires_manual_review else "",
            short(r.error, 50),
        )
    return table


async def _run_with(orchestrator, coro_fn, *args):
    try:
        return await coro_fn(*args)
    finally:
        await orchestrator.aclose()


@click.group()
def check():
    """Run version checks."""
    pass


@check.command("run")
def check_run():
    """Check every target that has a version-check URL."""
    c = get_components()
    orchestrator = build_orchestrator(c)

    try:
        with console.status("Checking versions..."):
            summary = asyncio.run(_run_with(orchestrator, orchestrator.run_all))
    except ConfigError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)

    if not summary.results:
        console.print("[yellow]No targets with a version-check URL. Add one with 'targets add'.[/]")
        return

    console.print(_results_table(summary.results))
    console.print(
        f"Checked {summary.total_checked}: [green]{summary.successful} ok[/], "
        f"[red]{summary.failed} failed[/], {summary.total_versions_added} new versions"
    )


@check.command("one")
@click.argument("target_id")
def check_one(target_id: str):
    """Check a single target now."""
    c = get_components()
    orchestrator = build_orchestrator(c)

    try:
        with console.status(f"Checking {target_id}..."):
            result = asyncio.run(_run_with(orchestrator, orchestrator.check_target, target_id))
    except TargetNotFoundError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)
    except RateLimitedError as e:
        console.print(f"[yellow]{e}[/]")
        sys.exit(1)
    except ConfigError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)

    console.print(_results_table([result]))
