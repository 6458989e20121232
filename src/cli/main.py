"""CLI entry point for versionwatch."""

import click

from cli.commands.checks import check
from cli.commands.daemon import daemon
from cli.commands.history import history
from cli.commands.init import init
from cli.commands.review import review
from cli.commands.serve import serve
from cli.commands.targets import targets
from cli.config import load_config_model
from cli.logging_config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="versionwatch")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines")
def cli(verbose: bool, json_logs: bool):
    """versionwatch - track software releases from vendor release notes."""
    try:
        config = load_config_model()
    except ValueError:
        # Commands report config errors themselves
        setup_logging(json_mode=json_logs, level="DEBUG" if verbose else "WARNING")
        return
    level = "DEBUG" if verbose else config.logging.level
    setup_logging(
        json_mode=json_logs or config.logging.json_mode,
        level=level,
        log_file=config.paths.log_file,
    )


cli.add_command(check)
cli.add_command(targets)
cli.add_command(review)
cli.add_command(history)
cli.add_command(daemon)
cli.add_command(serve)
cli.add_command(init)


if __name__ == "__main__":
    cli()
