"""Daemon CLI commands."""

import sys
import time

import click
from rich.console import Console

from checks.errors import ConfigError
from checks.scheduler import CheckScheduler
from cli.utils import build_orchestrator, get_components

console = Console()

_daemon_scheduler = None


@click.group()
def daemon():
    """Manage background scheduler."""
    pass


@daemon.command("start")
@click.option("--cron", default=None, help="Cron expression (default: checks.schedule)")
def daemon_start(cron: str | None):
    """Start scheduled version checks."""
    global _daemon_scheduler
    c = get_components()

    if _daemon_scheduler is not None:
        console.print("[yellow]Daemon already running[/]")
        return

    cron = cron or c["config"].checks.schedule
    _daemon_scheduler = CheckScheduler(lambda: build_orchestrator(c))
    _daemon_scheduler.start(cron_expr=cron)

    console.print(f"[green]Started[/] scheduler with cron: {cron}")
    console.print("Press Ctrl+C to stop")

    try:
        while True:
            time.sleep(60)
    except KeyboardInterrupt:
        _daemon_scheduler.stop()
        _daemon_scheduler = None
        console.print("\n[yellow]Stopped[/]")


@daemon.command("run-once")
def daemon_run_once():
    """Run all checks once (for cron/launchd integration)."""
    c = get_components()
    scheduler = CheckScheduler(lambda: build_orchestrator(c))
    try:
        summary = scheduler.run_now()
    except ConfigError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)
    console.print(
        f"Checked {summary.total_checked} targets: {summary.failed} failed, "
        f"{summary.total_versions_added} new versions"
    )
