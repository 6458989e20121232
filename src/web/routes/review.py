"""Manual review routes."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query

from checks.errors import TargetNotFoundError, VersionConflictError
from checks.review import ReviewQueue
from web.auth import require_cron_secret
from web.deps import get_review_queue
from web.models import ReviewEdit, VersionRecordOut

router = APIRouter(
    prefix="/api/review", tags=["review"], dependencies=[Depends(require_cron_secret)]
)


@router.get("", response_model=list[VersionRecordOut])
async def list_pending(
    limit: int = Query(default=50, ge=1, le=200),
    queue: ReviewQueue = Depends(get_review_queue),
):
    return [asdict(r) for r in queue.pending(limit=limit)]


@router.post("/{record_id}/approve", response_model=VersionRecordOut)
async def approve(record_id: int, queue: ReviewQueue = Depends(get_review_queue)):
    try:
        return asdict(queue.approve(record_id))
    except TargetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{record_id}", response_model=VersionRecordOut)
async def edit_and_approve(
    record_id: int, body: ReviewEdit, queue: ReviewQueue = Depends(get_review_queue)
):
    try:
        record = queue.edit_and_approve(
            record_id, version=body.version, release_date=body.release_date, notes=body.notes
        )
    except TargetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except VersionConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return asdict(record)


@router.post("/{record_id}/override", response_model=VersionRecordOut)
async def set_current_override(record_id: int, queue: ReviewQueue = Depends(get_review_queue)):
    try:
        return asdict(queue.set_current_override(record_id))
    except TargetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{record_id}")
async def reject(record_id: int, queue: ReviewQueue = Depends(get_review_queue)):
    try:
        queue.reject(record_id)
    except TargetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"ok": True}
