"""
Services

High-level workflows that tie collection, compilation and persistence together.
"""

from .reports import ReportService, resolve_api_key

__all__ = ["ReportService", "resolve_api_key"]
