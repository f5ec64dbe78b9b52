"""
Tests for report stores and job tracking.
"""

import gzip
import json

import pytest

from seoreport.collector import CollectionConfig, ReportOrchestrator
from seoreport.models import CallLogEntry, Report, ReportJob, ReportStatus
from seoreport.persistence import FileReportStore, JobTracker, MemoryReportStore


def make_job(job_id="job-1"):
    report = Report(
        api_responses=[CallLogEntry(endpoint="/backlinks/summary", params={"target": "example.com"}, credits=100)],
        total_credits=100,
    )
    return ReportJob(id=job_id, domain="example.com", status=ReportStatus.COMPLETED, progress=100, report=report)


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryReportStore()
    return FileReportStore(base_path=str(tmp_path / "reports"))


class TestStores:
    """Behaviour shared by every store."""

    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        job = make_job()
        await store.save(job.id, job)

        loaded = await store.load(job.id)

        assert loaded is not None
        assert loaded.status == ReportStatus.COMPLETED
        assert loaded.report.total_credits == 100
        assert loaded.report.api_responses[0].endpoint == "/backlinks/summary"
        assert loaded.report.api_responses[0].params == {"target": "example.com"}

    @pytest.mark.asyncio
    async def test_unknown_id(self, store):
        assert await store.load("missing") is None

    @pytest.mark.asyncio
    async def test_save_replaces(self, store):
        job = make_job()
        await store.save(job.id, job)
        job.progress = 50
        await store.save(job.id, job)

        assert (await store.load(job.id)).progress == 50

    @pytest.mark.asyncio
    async def test_delete(self, store):
        job = make_job()
        await store.save(job.id, job)

        assert await store.delete(job.id) is True
        assert await store.load(job.id) is None
        assert await store.delete(job.id) is False

    @pytest.mark.asyncio
    async def test_load_returns_copy(self, store):
        job = make_job()
        await store.save(job.id, job)

        loaded = await store.load(job.id)
        loaded.progress = 1

        assert (await store.load(job.id)).progress == 100


class TestFileReportStore:
    """File store specifics."""

    @pytest.mark.asyncio
    async def test_compressed_document(self, tmp_path):
        store = FileReportStore(base_path=str(tmp_path))
        job = make_job()
        await store.save(job.id, job)

        with gzip.open(tmp_path / "job-1.json.gz", "rt", encoding="utf-8") as f:
            document = json.load(f)

        assert "expires_at" in document
        assert document["job"]["domain"] == "example.com"

    @pytest.mark.asyncio
    async def test_expired_report_removed(self, tmp_path):
        store = FileReportStore(base_path=str(tmp_path), ttl_hours=-1)
        job = make_job()
        await store.save(job.id, job)

        assert await store.load(job.id) is None
        assert not (tmp_path / "job-1.json.gz").exists()

    @pytest.mark.asyncio
    async def test_path_traversal_stripped(self, tmp_path):
        store = FileReportStore(base_path=str(tmp_path))
        job = make_job("../escape")
        await store.save(job.id, job)

        assert (tmp_path / "escape.json.gz").exists()


class TestJobTracker:
    """Job lifecycle transitions are persisted."""

    @pytest.mark.asyncio
    async def test_lifecycle(self):
        store = MemoryReportStore()
        tracker = JobTracker(store)

        job = await tracker.create_job("example.com")
        assert (await store.load(job.id)).status == ReportStatus.PENDING

        await tracker.start(job)
        stored = await store.load(job.id)
        assert stored.status == ReportStatus.RUNNING
        assert stored.current_step == "Starting analysis..."

        await tracker.update_progress(job, "Fetching backlink and domain data...", 10)
        stored = await store.load(job.id)
        assert (stored.current_step, stored.progress) == ("Fetching backlink and domain data...", 10)

        await tracker.complete(job, Report())
        stored = await store.load(job.id)
        assert stored.status == ReportStatus.COMPLETED
        assert stored.progress == 100
        assert stored.current_step == "Report ready!"
        assert stored.report is not None
        assert stored.is_finished

    @pytest.mark.asyncio
    async def test_fail(self):
        tracker = JobTracker(MemoryReportStore())
        job = await tracker.create_job("example.com")

        await tracker.fail(job, "Invalid API key")

        stored = await tracker.get_job(job.id)
        assert stored.status == ReportStatus.FAILED
        assert stored.error == "Invalid API key"
        assert stored.report is None

    @pytest.mark.asyncio
    async def test_unique_ids(self):
        tracker = JobTracker(MemoryReportStore())
        first = await tracker.create_job("example.com")
        second = await tracker.create_job("example.com")
        assert first.id != second.id


class TestOrchestratedReportRoundTrip:
    """A generated report survives persistence field-for-field."""

    @pytest.mark.asyncio
    async def test_file_store(self, api_client, tmp_path):
        report = await ReportOrchestrator(api_client).generate(CollectionConfig(domain="example.com"))
        job = ReportJob(id="full", domain="example.com", status=ReportStatus.COMPLETED, progress=100, report=report)
        store = FileReportStore(base_path=str(tmp_path))

        await store.save(job.id, job)
        loaded = await store.load(job.id)

        assert loaded.report == report
        assert loaded.report.api_responses == report.api_responses
        assert loaded.report.total_credits == report.total_credits
        assert len(loaded.report.api_responses) > 0

    @pytest.mark.asyncio
    async def test_memory_store(self, api_client):
        report = await ReportOrchestrator(api_client).generate(CollectionConfig(domain="example.com"))
        job = ReportJob(id="full", domain="example.com", report=report)
        store = MemoryReportStore()

        await store.save(job.id, job)

        assert (await store.load(job.id)).report == report
