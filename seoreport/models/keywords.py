"""
Keyword research records.
"""

from typing import List, Optional

from pydantic import Field

from .base import Record


class KeywordQuestion(Record):
    keyword: str = ""
    volume: int = 0
    difficulty: int = 0
    cpc: float = 0


class KeywordSuggestion(Record):
    keyword: str = ""
    volume: int = 0
    difficulty: int = 0
    cpc: float = 0
    competition: float = 0
    trend: Optional[List[int]] = None
    currently_ranking: Optional[bool] = None
    position: Optional[int] = None


class KeywordResearch(Record):
    """Suggestions around one seed keyword."""
    seed_keyword: str = ""
    similar_keywords: List[KeywordSuggestion] = Field(default_factory=list)
    related_keywords: List[KeywordSuggestion] = Field(default_factory=list)
    long_tail_keywords: List[KeywordSuggestion] = Field(default_factory=list)
    # volume >= 1000 and difficulty < 40
    sweet_spot_keywords: List[KeywordSuggestion] = Field(default_factory=list)
