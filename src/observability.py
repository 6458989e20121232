"""Observability: check-run metrics and summary logging."""

import time
from contextlib import contextmanager
from typing import Any

import structlog

logger = structlog.get_logger().bind(source="observability")

# Names emitted by the check orchestrator
CHECKS_SUCCESS = "checks_success"
CHECKS_FAILURE = "checks_failure"
VERSIONS_ADDED = "versions_added"
FLAGGED_FOR_REVIEW = "flagged_for_review"
CHECK_DURATION = "check_duration"


class Metrics:
    """Dict-based counters and timers for one process."""

    def __init__(self):
        self._counters: dict[str, int] = {}
        self._timers: dict[str, list[float]] = {}

    def counter(self, name: str, value: int = 1):
        self._counters[name] = self._counters.get(name, 0) + value

    def get(self, name: str) -> int:
        """Current value of a counter (0 if never incremented)."""
        return self._counters.get(name, 0)

    def record_duration(self, name: str, seconds: float):
        self._timers.setdefault(name, []).append(seconds)

    @contextmanager
    def timer(self, name: str):
        """Time the enclosed block, recorded even when it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record_duration(name, time.perf_counter() - start)

    def summary(self) -> dict[str, Any]:
        timer_summary = {}
        for name, durations in self._timers.items():
            if durations:
                timer_summary[name] = {
                    "count": len(durations),
                    "total": round(sum(durations), 3),
                    "avg": round(sum(durations) / len(durations), 3),
                    "max": round(max(durations), 3),
                }
            else:
                timer_summary[name] = {"count": 0}

        return {
            "counters": dict(self._counters),
            "timers": timer_summary,
        }

    def reset(self):
        self._counters.clear()
        self._timers.clear()


# Module-level singleton
metrics = Metrics()


def log_run_summary(**extra):
    """Log the current metrics summary via structlog."""
    logger.info("run_summary", **metrics.summary(), **extra)
