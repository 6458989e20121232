"""Shared test fixtures for versionwatch."""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from checks.storage import VersionStore  # noqa: E402
from observability import metrics  # noqa: E402

from fakes import RESOLVE_PAGE  # noqa: E402


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def store(tmp_path):
    """Empty version store backed by a temp database."""
    return VersionStore(tmp_path / "versions.db")


@pytest.fixture
def resolve_target(store):
    return store.add_target(
        "DaVinci Resolve",
        version_check_url="https://example.com/resolve/releases",
        website="https://example.com/resolve",
        current_version="19.0",
        target_id="resolve",
    )


@pytest.fixture
def resolve_page():
    return RESOLVE_PAGE
