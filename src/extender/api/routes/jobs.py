"""Background job inspection endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from extender.api.deps import get_job_manager
from extender.api.schemas import JobListItem
from extender.jobs.manager import JobManager

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.get("", response_model=list[JobListItem])
async def list_jobs(
    track_id: int | None = Query(None, alias="trackId"),
    mgr: JobManager = Depends(get_job_manager),
) -> list[JobListItem]:
    return [JobListItem.from_job(j) for j in mgr.list_jobs(track_id)]
