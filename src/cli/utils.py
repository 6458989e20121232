"""Shared CLI utilities."""

import sys

import structlog
from rich.console import Console

console = Console()
logger = structlog.get_logger()


def get_components():
    """Load config and open the version store.

    Exits with a readable message when the config file is invalid.
    """
    from checks.review import ReviewQueue
    from checks.storage import VersionStore
    from cli.config import load_config_model

    try:
        config = load_config_model()
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)

    store = VersionStore(config.paths.db)
    return {
        "config": config,
        "store": store,
        "review": ReviewQueue(store),
    }


def build_orchestrator(components: dict):
    """Default orchestrator wired from the loaded components."""
    from checks.orchestrator import CheckOrchestrator

    return CheckOrchestrator.from_config(components["config"], store=components["store"])


def short(text: str | None, width: int = 60) -> str:
    if not text:
        return ""
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."
