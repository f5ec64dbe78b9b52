"""
Report Stores

Persist report jobs (and with them the compiled Report) by id.
"""

import gzip
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Optional

from seoreport.models import ReportJob
from seoreport.utils import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_TTL_HOURS = 24


class ReportStore(ABC):
    """Abstract base class for report stores."""

    @abstractmethod
    async def save(self, report_id: str, job: ReportJob) -> None:
        """Save or replace the job stored under ``report_id``."""
        pass

    @abstractmethod
    async def load(self, report_id: str) -> Optional[ReportJob]:
        """Load a job, or None if it is unknown or expired."""
        pass

    @abstractmethod
    async def delete(self, report_id: str) -> bool:
        """Delete a job. Returns whether anything was removed."""
        pass


class MemoryReportStore(ReportStore):
    """In-process store. Jobs are kept as serialized JSON so loads return fresh copies."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    async def save(self, report_id: str, job: ReportJob) -> None:
        self._items[report_id] = job.model_dump_json()

    async def load(self, report_id: str) -> Optional[ReportJob]:
        raw = self._items.get(report_id)
        if raw is None:
            return None
        return ReportJob.model_validate_json(raw)

    async def delete(self, report_id: str) -> bool:
        return self._items.pop(report_id, None) is not None


class FileReportStore(ReportStore):
    """
    File system report store.

    Each job is one gzip-compressed JSON document wrapped with its expiry:
        {"expires_at": "...", "job": {...}}
    """

    def __init__(self, base_path: Optional[str] = None, ttl_hours: float = DEFAULT_TTL_HOURS):
        """
        Initialize file store.

        Args:
            base_path: Root directory for reports.
                      Defaults to ~/.seoreport/reports/
            ttl_hours: Lifetime of a saved report
        """
        if base_path is None:
            base_path = str(Path.home() / ".seoreport" / "reports")

        self.base_path = Path(base_path).expanduser()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.ttl = timedelta(hours=ttl_hours)

        logger.info(f"FileReportStore initialized at {self.base_path}")

    def _get_path(self, report_id: str) -> Path:
        safe_id = report_id.replace("..", "").replace("/", "").replace("\\", "")
        return self.base_path / f"{safe_id}.json.gz"

    async def save(self, report_id: str, job: ReportJob) -> None:
        path = self._get_path(report_id)
        document = {
            "expires_at": (datetime.now(timezone.utc) + self.ttl).isoformat(),
            "job": job.model_dump(mode="json"),
        }
        with gzip.open(path, "wt", encoding="utf-8") as f:
            json.dump(document, f)
        logger.debug(f"Saved report {report_id} to {path}")

    async def load(self, report_id: str) -> Optional[ReportJob]:
        path = self._get_path(report_id)
        if not path.exists():
            return None

        with gzip.open(path, "rt", encoding="utf-8") as f:
            document = json.load(f)

        expires_at = datetime.fromisoformat(document["expires_at"])
        if expires_at <= datetime.now(timezone.utc):
            logger.info(f"Report {report_id} expired at {expires_at.isoformat()}")
            path.unlink(missing_ok=True)
            return None

        return ReportJob.model_validate(document["job"])

    async def delete(self, report_id: str) -> bool:
        path = self._get_path(report_id)
        if path.exists():
            path.unlink()
            logger.debug(f"Deleted {path}")
            return True
        return False


def get_report_store(settings: Optional[Settings] = None) -> ReportStore:
    """File store at the configured path and TTL."""
    settings = settings or get_settings()
    return FileReportStore(settings.REPORT_STORAGE_PATH, settings.REPORT_TTL_HOURS)
