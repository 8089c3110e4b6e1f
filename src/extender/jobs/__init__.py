"""Background job management for Track Extender."""

from extender.jobs.manager import JobManager
from extender.jobs.models import Job, JobStatus, JobType

__all__ = ["Job", "JobManager", "JobStatus", "JobType"]
