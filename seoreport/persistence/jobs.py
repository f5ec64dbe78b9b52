"""
Job Tracking

Track report jobs from submission to a terminal state.
"""

import logging
import uuid
from typing import Optional

from seoreport.models import Report, ReportJob, ReportStatus

from .storage import ReportStore

logger = logging.getLogger(__name__)


class JobTracker:
    """
    Lifecycle of report jobs on top of a ReportStore.

    Every transition is persisted before it returns.
    """

    def __init__(self, store: ReportStore):
        self.store = store

    async def create_job(self, domain: str) -> ReportJob:
        """Create and persist a pending job."""
        job = ReportJob(id=str(uuid.uuid4()), domain=domain)
        await self.store.save(job.id, job)
        logger.info(f"Created job {job.id} for {domain}")
        return job

    async def get_job(self, job_id: str) -> Optional[ReportJob]:
        return await self.store.load(job_id)

    async def start(self, job: ReportJob) -> ReportJob:
        job.status = ReportStatus.RUNNING
        job.current_step = "Starting analysis..."
        await self.store.save(job.id, job)
        return job

    async def update_progress(self, job: ReportJob, step: str, progress: int) -> ReportJob:
        job.current_step = step
        job.progress = progress
        await self.store.save(job.id, job)
        return job

    async def complete(self, job: ReportJob, report: Report) -> ReportJob:
        job.status = ReportStatus.COMPLETED
        job.progress = 100
        job.current_step = "Report ready!"
        job.report = report
        await self.store.save(job.id, job)
        logger.info(f"Job {job.id} completed")
        return job

    async def fail(self, job: ReportJob, error: str) -> ReportJob:
        job.status = ReportStatus.FAILED
        job.error = error
        await self.store.save(job.id, job)
        logger.error(f"Job {job.id} failed: {error}")
        return job
