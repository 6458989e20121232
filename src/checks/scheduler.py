"""Cron scheduling for periodic check runs."""

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import structlog
from apscheduler.events import EVENT_JOB_ERROR
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from .models import CheckSummary
from .orchestrator import CheckOrchestrator

logger = structlog.get_logger().bind(source="check_scheduler")

DEFAULT_STATUS_PATH = Path("~/.versionwatch/last_run_status.json")


def _parse_cron(expr: str) -> CronTrigger:
    """Parse a 5-field cron expression (min hour day month dow)."""
    d = {"minute": "0", "hour": "*/6", "day": "*", "month": "*", "day_of_week": "*"}
    parts = expr.split()
    return CronTrigger(
        minute=parts[0] if len(parts) > 0 else d["minute"],
        hour=parts[1] if len(parts) > 1 else d["hour"],
        day=parts[2] if len(parts) > 2 else d["day"],
        month=parts[3] if len(parts) > 3 else d["month"],
        day_of_week=parts[4] if len(parts) > 4 else d["day_of_week"],
    )


class CheckScheduler:
    """Runs a full check on a cron schedule.

    ``orchestrator_factory`` builds a fresh orchestrator for every run, since
    each run gets its own event loop and HTTP client.
    """

    def __init__(
        self,
        orchestrator_factory: Callable[[], CheckOrchestrator],
        status_path: Path = DEFAULT_STATUS_PATH,
        on_error: Optional[Callable] = None,
    ):
        self.orchestrator_factory = orchestrator_factory
        self.status_path = Path(status_path).expanduser()
        self.on_error = on_error
        self.scheduler = BackgroundScheduler()

    async def _run_async(self) -> CheckSummary:
        orchestrator = self.orchestrator_factory()
        try:
            return await orchestrator.run_all()
        finally:
            await orchestrator.aclose()

    def run_now(self) -> CheckSummary:
        """Run all checks from sync context and record the outcome."""
        summary = asyncio.run(self._run_async())
        self._write_status(
            {
                "status": "ok",
                "total_checked": summary.total_checked,
                "successful": summary.successful,
                "failed": summary.failed,
                "total_versions_added": summary.total_versions_added,
            }
        )
        return summary

    def _write_status(self, data: dict) -> None:
        data["timestamp"] = datetime.now().isoformat()
        self.status_path.parent.mkdir(parents=True, exist_ok=True)
        self.status_path.write_text(json.dumps(data, indent=2))

    def _default_error_handler(self, event):
        """Log and record APScheduler job failures."""
        logger.error(
            "job_error",
            job_id=event.job_id,
            exception=str(event.exception),
            traceback=event.traceback,
        )
        self._write_status(
            {"status": "error", "job_id": event.job_id, "error": str(event.exception)}
        )

        if self.on_error:
            try:
                self.on_error(event)
            except Exception as e:
                logger.error("on_error_callback_failed", error=str(e))

    def start(self, cron_expr: str = "0 */6 * * *"):
        """Start scheduled checks."""
        self.scheduler.add_job(
            self.run_now,
            trigger=_parse_cron(cron_expr),
            id="version_check",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.add_listener(self._default_error_handler, EVENT_JOB_ERROR)
        self.scheduler.start()
        logger.info("scheduler_started", cron=cron_expr)

    def stop(self):
        """Stop scheduler."""
        self.scheduler.shutdown()
