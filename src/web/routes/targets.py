"""Read-only target and version history routes."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query

from checks.storage import VersionStore
from web.auth import require_cron_secret
from web.deps import get_store
from web.models import TargetOut, VersionRecordOut

router = APIRouter(
    prefix="/api/targets", tags=["targets"], dependencies=[Depends(require_cron_secret)]
)


@router.get("", response_model=list[TargetOut])
async def list_targets(store: VersionStore = Depends(get_store)):
    return [asdict(t) for t in store.list_targets()]


@router.get("/{target_id}/versions", response_model=list[VersionRecordOut])
async def list_versions(
    target_id: str,
    limit: int = Query(default=50, ge=1, le=200),
    store: VersionStore = Depends(get_store),
):
    if store.get_target(target_id) is None:
        raise HTTPException(status_code=404, detail=f"Target {target_id} not found")
    return [asdict(r) for r in store.list_versions(target_id, limit=limit)]
