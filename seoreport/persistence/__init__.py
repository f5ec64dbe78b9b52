"""
Persistence Layer

Report stores and job tracking.
"""

from .jobs import JobTracker
from .storage import FileReportStore, MemoryReportStore, ReportStore, get_report_store

__all__ = [
    "FileReportStore",
    "JobTracker",
    "MemoryReportStore",
    "ReportStore",
    "get_report_store",
]
