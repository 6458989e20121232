"""Version checks: scraping, extraction, persistence and orchestration."""

from .errors import (
    ConfigError,
    ExtractionError,
    NetworkError,
    PersistenceError,
    RateLimitedError,
    TargetNotFoundError,
    VersionConflictError,
    VersionWatchError,
)
from .models import (
    CheckResult,
    CheckSummary,
    ExtractionResult,
    Target,
    VersionCandidate,
    VersionRecord,
)
from .orchestrator import CheckOrchestrator
from .review import ReviewQueue
from .storage import VersionStore

__all__ = [
    "CheckOrchestrator",
    "VersionStore",
    "ReviewQueue",
    "Target",
    "VersionRecord",
    "VersionCandidate",
    "ExtractionResult",
    "CheckResult",
    "CheckSummary",
    "VersionWatchError",
    "ConfigError",
    "NetworkError",
    "ExtractionError",
    "PersistenceError",
    "RateLimitedError",
    "TargetNotFoundError",
    "VersionConflictError",
]
