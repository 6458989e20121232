"""Error taxonomy for version checks."""


class VersionWatchError(Exception):
    """Base error."""


class ConfigError(VersionWatchError):
    """Required configuration missing. Aborts a whole run."""


class NetworkError(VersionWatchError):
    """Page fetch failed, timed out or returned no usable content."""


class ExtractionError(VersionWatchError):
    """Extraction call failed or returned a malformed payload."""


class PersistenceError(VersionWatchError):
    """The version store rejected a read or write."""


class TargetNotFoundError(VersionWatchError):
    """No tracked target or version record with the given id."""


class RateLimitedError(VersionWatchError):
    """A manual check for this target is still cooling down."""

    def __init__(self, key: str, retry_after: float):
        self.key = key
        self.retry_after = retry_after
        super().__init__(f"Check for {key} is cooling down; retry in {retry_after:.0f}s")


class VersionConflictError(VersionWatchError):
    """An edit would give a target two rows with the same version."""
