"""Job manager with in-memory bookkeeping and background execution."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from extender.jobs.models import Job, JobStatus, JobType

logger = logging.getLogger(__name__)

JobFunc = Callable[[Job], Awaitable[None]]


class JobManager:
    """Runs fire-and-forget jobs with concurrency control.

    Jobs are stored in-memory (dict). Background execution uses
    asyncio.create_task with a semaphore for concurrency limiting. The
    submitting request never waits for the job; the job's own function is
    its completion continuation.
    """

    def __init__(self, max_concurrent: int = 2, max_history: int = 500) -> None:
        self._jobs: dict[str, Job] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._max_history = max_history

    def submit(self, job_type: JobType, track_id: int, func: JobFunc) -> Job:
        """Create a job and schedule ``func`` for background execution.

        Args:
            job_type: Type of job to create.
            track_id: Track the job works on.
            func: Coroutine function receiving the Job.

        Returns:
            The created Job (status=pending).
        """
        job = Job(type=job_type, track_id=track_id)
        self._jobs[job.id] = job
        task = asyncio.create_task(self._run_job(job, func))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job

    def get_job(self, job_id: str) -> Job | None:
        """Get a job by ID."""
        return self._jobs.get(job_id)

    def list_jobs(self, track_id: int | None = None) -> list[Job]:
        """List jobs, most recent first."""
        jobs = [j for j in self._jobs.values() if track_id is None or j.track_id == track_id]
        return sorted(jobs, key=lambda j: j.created_at, reverse=True)

    async def wait_idle(self) -> None:
        """Wait until every submitted job has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel outstanding jobs and wait for them to unwind."""
        pending = list(self._tasks)
        if pending:
            logger.info("Cancelling %d background jobs", len(pending))
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    async def _run_job(self, job: Job, func: JobFunc) -> None:
        """Execute a job with semaphore-based concurrency control."""
        async with self._semaphore:
            job.status = JobStatus.PROCESSING
            job.message = "Running..."
            try:
                await func(job)
                job.status = JobStatus.COMPLETED
                job.message = "Complete"
            except Exception as e:
                logger.exception("Job %s (%s, track %d) failed", job.id, job.type.value, job.track_id)
                job.status = JobStatus.FAILED
                job.error = str(e)
                job.message = "Failed"
            finally:
                job.completed_at = datetime.now(timezone.utc)
                self._prune_history()

    def _prune_history(self) -> None:
        """Forget the oldest finished jobs beyond the history limit."""
        finished = [j for j in self._jobs.values() if j.completed_at is not None]
        excess = len(finished) - self._max_history
        if excess <= 0:
            return
        finished.sort(key=lambda j: j.completed_at)
        for job in finished[:excess]:
            del self._jobs[job.id]
