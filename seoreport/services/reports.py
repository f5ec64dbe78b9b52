"""
Report Service

Drives one report job through pending -> running -> completed | failed:
1. Clean and validate the target domain
2. Resolve the SE Ranking credential (explicit, configured, then shared)
3. Run the orchestrator on a fresh client, persisting every progress event
4. Persist the terminal state
"""

import asyncio
import contextlib
import logging
from typing import Callable, Dict, Literal, Optional, Tuple

from seoreport.collector import (
    CollectionConfig,
    FatalConfigurationError,
    ProgressEvent,
    ProgressStream,
    ReportOrchestrator,
    SeRankingClient,
)
from seoreport.models import ReportJob
from seoreport.persistence import JobTracker, ReportStore, get_report_store
from seoreport.utils import Settings, clean_domain, get_settings, validate_domain

logger = logging.getLogger(__name__)

KeyMode = Literal["user", "shared"]
ClientFactory = Callable[[str, KeyMode], SeRankingClient]


def resolve_api_key(explicit: Optional[str], settings: Settings) -> Tuple[str, KeyMode]:
    """
    Pick the credential for a run.

    Raises:
        FatalConfigurationError: Neither a caller key nor a shared key is available
    """
    if explicit:
        return explicit, "user"
    if settings.SERANKING_API_KEY:
        return settings.SERANKING_API_KEY, "user"
    if settings.SE_RANKING_SHARED_API_KEY:
        return settings.SE_RANKING_SHARED_API_KEY, "shared"
    raise FatalConfigurationError("Please provide your SE Ranking API key")


class ReportService:
    """Creates report jobs and runs them to a persisted terminal state."""

    def __init__(
        self,
        store: Optional[ReportStore] = None,
        settings: Optional[Settings] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.settings = settings or get_settings()
        self.jobs = JobTracker(store or get_report_store(self.settings))
        self.client_factory = client_factory or self._default_client
        self._credentials: Dict[str, Tuple[str, KeyMode]] = {}

    def _default_client(self, api_key: str, mode: KeyMode) -> SeRankingClient:
        return SeRankingClient(
            api_key=api_key,
            base_url=self.settings.SERANKING_BASE_URL,
            rate_limit=self.settings.RATE_LIMIT_PER_SECOND,
            enable_logging=self.settings.ENABLE_CALL_LOGGING,
            mode=mode,
            timeout=self.settings.API_TIMEOUT,
        )

    def _config(self, domain: str) -> CollectionConfig:
        return CollectionConfig(
            domain=domain,
            max_competitors=self.settings.MAX_COMPETITORS,
            prompts_per_engine=self.settings.PROMPTS_PER_ENGINE,
            aggregate_limit=self.settings.AGGREGATE_LIMIT,
        )

    async def create(self, domain: str, api_key: Optional[str] = None) -> ReportJob:
        """
        Validate the request and persist a pending job.

        Raises:
            FatalConfigurationError: Invalid domain or no usable credential
        """
        cleaned = clean_domain(domain)
        if not cleaned or not validate_domain(cleaned):
            raise FatalConfigurationError(
                "Invalid domain. Please enter a valid domain (e.g., example.com)"
            )
        credential = resolve_api_key(api_key, self.settings)

        job = await self.jobs.create_job(cleaned)
        self._credentials[job.id] = credential
        return job

    async def generate(self, job: ReportJob) -> ReportJob:
        """
        Run a created job to completion. Never raises for run failures;
        they end in the failed state with the error message persisted.
        """
        credential = self._credentials.pop(job.id, None)
        await self.jobs.start(job)

        if credential is None:
            return await self.jobs.fail(job, "No API credential registered for this job")

        stream = ProgressStream()

        async def run():
            try:
                client = self.client_factory(*credential)
                async with client:
                    orchestrator = ReportOrchestrator(client, on_progress=stream.emit)
                    return await orchestrator.generate(self._config(job.domain))
            finally:
                stream.close()

        task = asyncio.create_task(run())
        try:
            async for event in stream:
                await self._save_progress(job, event)
            report = await task
        except Exception as e:
            logger.exception(f"Report generation error for {job.domain}")
            return await self.jobs.fail(job, str(e) or "Unknown error")
        finally:
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

        return await self.jobs.complete(job, report)

    async def _save_progress(self, job: ReportJob, event: ProgressEvent) -> None:
        """Progress writes are best effort; a failed write never fails the run."""
        try:
            await self.jobs.update_progress(job, event.step, event.percent)
        except Exception as e:
            logger.warning(f"Could not persist progress for job {job.id}: {e}")

    async def run(self, domain: str, api_key: Optional[str] = None) -> ReportJob:
        """Create and generate in one call."""
        job = await self.create(domain, api_key)
        return await self.generate(job)

    async def get(self, report_id: str) -> Optional[ReportJob]:
        return await self.jobs.get_job(report_id)
