"""Check trigger routes."""

from dataclasses import asdict

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from checks.errors import ConfigError, RateLimitedError, TargetNotFoundError
from checks.orchestrator import CheckOrchestrator
from checks.storage import VersionStore
from web.auth import require_cron_secret
from web.deps import get_orchestrator, get_store
from web.models import CheckResultOut, CheckSummaryOut

logger = structlog.get_logger().bind(source="web_checks")

router = APIRouter(
    prefix="/api/checks", tags=["checks"], dependencies=[Depends(require_cron_secret)]
)


@router.post("/run", response_model=CheckSummaryOut)
async def run_all_checks(orchestrator: CheckOrchestrator = Depends(get_orchestrator)):
    """Check every target with a version-check URL."""
    try:
        summary = await orchestrator.run_all()
    except ConfigError as e:
        logger.error("run_aborted_config", error=str(e))
        raise HTTPException(status_code=500, detail=f"Configuration error: {e}")
    return asdict(summary)


@router.get("/recent")
async def recent_checks(
    software_id: str | None = None,
    limit: int = Query(default=20, ge=1, le=200),
    store: VersionStore = Depends(get_store),
):
    return store.recent_checks(software_id, limit=limit)


@router.post("/{target_id}", response_model=CheckResultOut)
async def check_one_target(
    target_id: str, orchestrator: CheckOrchestrator = Depends(get_orchestrator)
):
    """Check one target now; 429 while its cooldown runs."""
    try:
        result = await orchestrator.check_target(target_id)
    except TargetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RateLimitedError as e:
        raise HTTPException(
            status_code=429,
            detail=str(e),
            headers={"Retry-After": str(int(e.retry_after) + 1)},
        )
    except ConfigError as e:
        raise HTTPException(status_code=500, detail=f"Configuration error: {e}")
    return asdict(result)
