"""Shared fixtures for web API tests."""

import pytest
from fastapi.testclient import TestClient

from checks.orchestrator import CheckOrchestrator
from cli.rate_limit import KeyedCooldownLimiter
from fakes import RESOLVE_PAGE, FakeExtractor, FakeScraper, make_extraction
from web.app import app

CRON_SECRET = "test-cron-secret"


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {CRON_SECRET}"}


@pytest.fixture
def orchestrator(store):
    return CheckOrchestrator(
        store=store,
        scraper=FakeScraper(default=RESOLVE_PAGE),
        extractor=FakeExtractor(default=make_extraction()),
        cooldown=KeyedCooldownLimiter(period=30),
    )


@pytest.fixture
def client(monkeypatch, store, orchestrator):
    """TestClient over app.state wired to a temp store; lifespan not run."""
    monkeypatch.setenv("CRON_SECRET", CRON_SECRET)
    app.state.store = store
    app.state.orchestrator = orchestrator
    yield TestClient(app)
    del app.state.store
    del app.state.orchestrator
