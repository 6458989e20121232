"""Concurrent per-target version checks with idempotent persistence."""

import asyncio
import time
import uuid
from typing import Optional, Protocol

import structlog
import structlog.contextvars

from cli.config_models import AppConfig, ScoringConfig
from cli.rate_limit import KeyedCooldownLimiter, TokenBucketRateLimiter
from observability import (
    CHECK_DURATION,
    CHECKS_FAILURE,
    CHECKS_SUCCESS,
    FLAGGED_FOR_REVIEW,
    VERSIONS_ADDED,
    log_run_summary,
    metrics,
)
from shared_types import CheckState, ExtractionMethod
from versioning import (
    calculate_confidence_score,
    detect_suspicious_release_date,
    detect_version_anomaly,
    normalize_version,
    requires_manual_review,
    should_ignore_version,
    validate_extraction,
)

from .errors import (
    NetworkError,
    PersistenceError,
    RateLimitedError,
    TargetNotFoundError,
    VersionWatchError,
)
from .models import CheckResult, CheckSummary, ExtractionResult, Target, VersionRecord
from .storage import VersionStore

logger = structlog.get_logger().bind(source="check_orchestrator")


class Scraper(Protocol):
    async def fetch_text(self, url: str) -> str: ...


class Extractor(Protocol):
    async def extract(self, product_name: str, content: str) -> ExtractionResult: ...


class CheckOrchestrator:
    """Runs one check per target: scrape, extract, validate, persist.

    Failures stay inside the target that raised them. Only a missing
    configuration (``ConfigError`` from the extractor) aborts a run.
    """

    def __init__(
        self,
        store: VersionStore,
        scraper: Scraper,
        extractor: Extractor,
        max_concurrency: int = 5,
        target_timeout: float = 120.0,
        run_timeout: float = 1800.0,
        scoring: Optional[ScoringConfig] = None,
        scraper_limiter: Optional[TokenBucketRateLimiter] = None,
        extractor_limiter: Optional[TokenBucketRateLimiter] = None,
        cooldown: Optional[KeyedCooldownLimiter] = None,
    ):
        self.store = store
        self.scraper = scraper
        self.extractor = extractor
        self.max_concurrency = max_concurrency
        self.target_timeout = target_timeout
        self.run_timeout = run_timeout
        self.scoring = scoring or ScoringConfig()
        self.scraper_limiter = scraper_limiter
        self.extractor_limiter = extractor_limiter
        self.cooldown = cooldown

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        store: Optional[VersionStore] = None,
        scraper: Optional[Scraper] = None,
        extractor: Optional[Extractor] = None,
    ) -> "CheckOrchestrator":
        """Wire the default collaborators from an ``AppConfig``."""
        from .extractor import VersionExtractor
        from .scraper import PageScraper

        checks = config.checks
        return cls(
            store=store or VersionStore(config.paths.db),
            scraper=scraper
            or PageScraper(
                timeout=checks.scrape_timeout,
                max_chars=checks.max_content_chars,
                retry_config=config.retry,
            ),
            extractor=extractor
            or VersionExtractor(llm_config=config.llm, retry_config=config.retry),
            max_concurrency=checks.max_concurrency,
            target_timeout=checks.target_timeout,
            run_timeout=checks.run_timeout,
            scoring=config.scoring,
            scraper_limiter=TokenBucketRateLimiter.from_config(config.rate_limits.scraper),
            extractor_limiter=TokenBucketRateLimiter.from_config(config.rate_limits.extractor),
            cooldown=KeyedCooldownLimiter(period=checks.manual_cooldown_seconds),
        )

    def ensure_configured(self) -> None:
        """Raise ``ConfigError`` when the extraction collaborator cannot run."""
        ensure = getattr(self.extractor, "ensure_configured", None)
        if ensure is not None:
            ensure()

    # --- entry points ---

    async def run_all(self) -> CheckSummary:
        """Check every target that has a version-check URL."""
        run_id = uuid.uuid4().hex[:8]
        structlog.contextvars.bind_contextvars(run_id=run_id)
        try:
            self.ensure_configured()
            targets = self.store.list_targets_with_version_url()
            logger.info("run.started", targets=len(targets), max_concurrency=self.max_concurrency)

            results = {t.id: CheckResult(software_id=t.id, name=t.name) for t in targets}
            semaphore = asyncio.Semaphore(self.max_concurrency)
            tasks = {
                asyncio.create_task(
                    self._guarded_check(t, results[t.id], semaphore, run_id)
                ): t
                for t in targets
            }

            if tasks:
                _, pending = await asyncio.wait(tasks, timeout=self.run_timeout)
                for task in pending:
                    task.cancel()
                if pending:
                    await asyncio.gather(*pending, return_exceptions=True)
                    logger.warning("run.timeout", unfinished=len(pending), timeout=self.run_timeout)
                for task in pending:
                    result = results[tasks[task].id]
                    if not result.state.is_terminal:
                        self._fail(result, "run timeout")
                        self._finish(result, run_id)

            summary = CheckSummary.from_results(list(results.values()))
            logger.info(
                "run.complete",
                total=summary.total_checked,
                successful=summary.successful,
                failed=summary.failed,
                versions_added=summary.total_versions_added,
            )
            log_run_summary(run_id=run_id)
            return summary
        finally:
            structlog.contextvars.unbind_contextvars("run_id")

    async def check_target(self, target_id: str) -> CheckResult:
        """Manually check one target, subject to the per-target cooldown.

        Raises:
            TargetNotFoundError: unknown id.
            RateLimitedError: the target was checked too recently.
            ConfigError: extraction is not configured.
        """
        target = self.store.get_target(target_id)
        if target is None:
            raise TargetNotFoundError(f"Target {target_id} not found")

        if self.cooldown is not None:
            retry_after = self.cooldown.try_acquire(target_id)
            if retry_after > 0:
                raise RateLimitedError(target_id, retry_after)

        self.ensure_configured()
        result = CheckResult(software_id=target.id, name=target.name)
        if not target.version_check_url:
            self._fail(result, "Target has no version check URL")
            self._finish(result)
            return result

        await self._guarded_check(target, result)
        return result

    def run_now(self) -> CheckSummary:
        """Run all checks from sync context."""
        return asyncio.run(self.run_all())

    async def aclose(self) -> None:
        close = getattr(self.scraper, "close", None)
        if close is not None:
            await close()

    # --- per-target state machine ---

    async def _guarded_check(
        self,
        target: Target,
        result: CheckResult,
        semaphore: Optional[asyncio.Semaphore] = None,
        run_id: Optional[str] = None,
    ) -> CheckResult:
        if semaphore is not None:
            await semaphore.acquire()
        start = time.perf_counter()
        try:
            logger.info("check.started", software_id=target.id, name=target.name)
            await asyncio.wait_for(self._pipeline(target, result), timeout=self.target_timeout)
            result.state = CheckState.DONE
            result.success = True
        except asyncio.TimeoutError:
            self._fail(result, f"Timed out after {self.target_timeout:.0f}s during {result.state}")
        except VersionWatchError as e:
            self._fail(result, str(e))
        except Exception as e:
            logger.exception("check.unexpected_error", software_id=target.id)
            self._fail(result, f"Unexpected {type(e).__name__}: {e}")
        finally:
            metrics.record_duration(CHECK_DURATION, time.perf_counter() - start)
            if semaphore is not None:
                semaphore.release()

        self._finish(result, run_id)
        return result

    async def _pipeline(self, target: Target, result: CheckResult) -> None:
        result.state = CheckState.SCRAPING
        if self.scraper_limiter is not None:
            await self.scraper_limiter.acquire()
        content = await self.scraper.fetch_text(target.version_check_url)
        if not content or not content.strip():
            raise NetworkError(f"No content found at {target.version_check_url}")

        result.state = CheckState.EXTRACTING
        if self.extractor_limiter is not None:
            await self.extractor_limiter.acquire()
        extracted = await self.extractor.extract(target.name, content)

        result.state = CheckState.VALIDATING
        scoring = self.scoring
        validation = validate_extraction(
            target, extracted, content, min_valid_confidence=scoring.min_valid_confidence
        )
        new_current = (
            normalize_version(extracted.current_version, target.name)
            if extracted.current_version
            else None
        )
        anomaly = detect_version_anomaly(
            target.current_version, new_current, target, max_major_step=scoring.max_major_step
        )
        date_check = detect_suspicious_release_date(extracted.release_date)
        has_anomaly = anomaly.has_anomaly or date_check.has_anomaly

        if new_current:
            score = min(
                validation.confidence,
                calculate_confidence_score(
                    extracted.ai_confidence,
                    validation.product_name_found,
                    validation.proximity,
                    has_anomaly,
                    anomaly_ceiling=scoring.anomaly_ceiling,
                ),
            )
        elif has_anomaly:
            score = min(validation.confidence, scoring.anomaly_ceiling)
        else:
            score = validation.confidence

        review = requires_manual_review(
            validation.valid, has_anomaly, score, threshold=scoring.review_threshold
        )
        result.score = score
        result.requires_manual_review = review

        notes = [validation.reason, *validation.warnings]
        if anomaly.has_anomaly:
            notes.append(anomaly.reason)
        if date_check.has_anomaly:
            notes.append(date_check.reason)
        notes.extend(date_check.warnings)

        if has_anomaly:
            logger.warning(
                "check.anomaly",
                software_id=target.id,
                previous=target.current_version,
                extracted=new_current,
                reason=anomaly.reason if anomaly.has_anomaly else date_check.reason,
            )

        result.state = CheckState.PERSISTING
        found, added = self._persist(
            target, extracted, new_current, score, review, "; ".join(n for n in notes if n)
        )
        result.versions_found = found
        result.versions_added = added

    def _persist(
        self,
        target: Target,
        extracted: ExtractionResult,
        new_current: Optional[str],
        score: int,
        review: bool,
        validation_notes: str,
    ) -> tuple[int, int]:
        found = 0
        added = 0
        seen: set[str] = set()

        for candidate in extracted.versions:
            version = normalize_version(candidate.version, target.name)
            if not version or version in seen or should_ignore_version(target.name, version):
                continue
            seen.add(version)
            found += 1

            release_date = candidate.release_date.isoformat() if candidate.release_date else None
            existing = self.store.find_version_record(target.id, version)
            if existing is not None:
                fields = {"type": candidate.type}
                if candidate.notes:
                    fields["notes"] = candidate.notes_markdown
                if release_date:
                    fields["release_date"] = release_date
                self.store.update_version_record(existing.id, fields)
                continue

            record = VersionRecord(
                software_id=target.id,
                version=version,
                release_date=release_date,
                notes=candidate.notes_markdown,
                type=candidate.type,
                confidence_score=score,
                requires_manual_review=review,
                newsletter_verified=not review,
                validation_notes=validation_notes,
                extraction_method=ExtractionMethod.LLM,
            )
            if self.store.insert_version_record(record) is not None:
                added += 1

        if new_current:
            self.store.update_target_current_version(
                target.id,
                new_current,
                extracted.release_date.isoformat() if extracted.release_date else None,
            )
        else:
            self.store.touch_target(target.id)
        return found, added

    # --- bookkeeping ---

    def _fail(self, result: CheckResult, error: str) -> None:
        logger.warning(
            "check.failed",
            software_id=result.software_id,
            name=result.name,
            stage=str(result.state),
            error=error,
        )
        result.success = False
        result.error = error
        result.state = CheckState.FAILED

    def _finish(self, result: CheckResult, run_id: Optional[str] = None) -> None:
        if result.success:
            metrics.counter(CHECKS_SUCCESS)
            metrics.counter(VERSIONS_ADDED, result.versions_added)
            if result.requires_manual_review and result.versions_added:
                metrics.counter(FLAGGED_FOR_REVIEW, result.versions_added)
            logger.info(
                "check.complete",
                software_id=result.software_id,
                versions_found=result.versions_found,
                versions_added=result.versions_added,
                score=result.score,
                requires_manual_review=result.requires_manual_review,
            )
        else:
            metrics.counter(CHECKS_FAILURE)

        try:
            self.store.record_check(result, run_id=run_id)
        except PersistenceError as e:
            logger.warning("check.audit_failed", software_id=result.software_id, error=str(e))
