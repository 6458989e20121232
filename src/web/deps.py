"""Dependency injection for FastAPI routes."""

from functools import lru_cache

from fastapi import Request

from checks.orchestrator import CheckOrchestrator
from checks.review import ReviewQueue
from checks.storage import VersionStore
from cli.config import load_config_model
from cli.config_models import AppConfig


@lru_cache
def get_config() -> AppConfig:
    """Load shared config (cwd, ~/.versionwatch or ~/versionwatch)."""
    return load_config_model()


def get_store(request: Request) -> VersionStore:
    return request.app.state.store


def get_orchestrator(request: Request) -> CheckOrchestrator:
    return request.app.state.orchestrator


def get_review_queue(request: Request) -> ReviewQueue:
    return ReviewQueue(request.app.state.store)
