"""
Cross-competitor aggregation and AI prompt deduplication.
"""

from .competitors import (
    aggregate_backlink_gaps,
    aggregate_keyword_gaps,
    aggregate_keyword_overlaps,
    summarize_analysis,
)
from .prompts import deduplicate_prompts, merge_classification
