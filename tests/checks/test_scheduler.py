"""Tests for the cron check scheduler."""

import json
from unittest.mock import MagicMock

import pytest

from checks.orchestrator import CheckOrchestrator
from checks.scheduler import CheckScheduler, _parse_cron
from fakes import RESOLVE_PAGE, FakeExtractor, FakeScraper, make_extraction


def test_parse_cron_fields():
    trigger = _parse_cron("15 3 * * mon")
    fields = {f.name: str(f) for f in trigger.fields}
    assert fields["minute"] == "15"
    assert fields["hour"] == "3"
    assert fields["day_of_week"] == "mon"


class TestCheckScheduler:
    @pytest.fixture
    def scheduler(self, store, resolve_target, tmp_path):
        scrapers = []

        def factory():
            scraper = FakeScraper(default=RESOLVE_PAGE)
            scrapers.append(scraper)
            return CheckOrchestrator(
                store=store, scraper=scraper, extractor=FakeExtractor(default=make_extraction())
            )

        sched = CheckScheduler(factory, status_path=tmp_path / "status.json")
        sched.scrapers = scrapers
        return sched

    def test_run_now_writes_status(self, scheduler):
        summary = scheduler.run_now()
        assert summary.successful == 1

        status = json.loads(scheduler.status_path.read_text())
        assert status["status"] == "ok"
        assert status["total_versions_added"] == 2
        assert "timestamp" in status

    def test_fresh_orchestrator_per_run(self, scheduler):
        scheduler.run_now()
        scheduler.run_now()
        assert len(scheduler.scrapers) == 2
        assert all(s.closed for s in scheduler.scrapers)

    def test_error_listener(self, tmp_path):
        on_error = MagicMock()
        sched = CheckScheduler(MagicMock(), status_path=tmp_path / "s.json", on_error=on_error)
        event = MagicMock(job_id="version_check", exception=RuntimeError("boom"), traceback="tb")

        sched._default_error_handler(event)

        status = json.loads((tmp_path / "s.json").read_text())
        assert status["status"] == "error"
        assert status["error"] == "boom"
        on_error.assert_called_once_with(event)

    def test_start_and_stop(self, scheduler):
        scheduler.start("0 */6 * * *")
        job = scheduler.scheduler.get_job("version_check")
        assert job is not None
        scheduler.stop()
