"""Init CLI command."""

from pathlib import Path

import click
from rich.console import Console

from checks.storage import VersionStore
from cli.config import find_config, load_config_model, write_default_config

console = Console()


@click.command()
@click.option(
    "--config-path",
    type=click.Path(path_type=Path),
    default=Path.home() / ".versionwatch" / "config.yaml",
    show_default=True,
    help="Where to write the default config",
)
def init(config_path: Path):
    """Create a default config and the version database."""
    existing = find_config()
    if existing:
        console.print(f"[green]✓[/] config: {existing}")
    else:
        written = write_default_config(config_path)
        console.print(f"[green]✓[/] Created config: {written}")

    config = load_config_model(existing or config_path)
    VersionStore(config.paths.db)
    console.print(f"[green]✓[/] database: {config.paths.db}")

    console.print("\n[bold]Next steps:[/]")
    console.print("  1. Set ANTHROPIC_API_KEY (or OPENAI_API_KEY)")
    console.print("  2. Run [cyan]versionwatch targets add 'Product' --url https://...[/]")
    console.print("  3. Run [cyan]versionwatch check run[/]")
