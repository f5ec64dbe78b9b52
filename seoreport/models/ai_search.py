"""
AI search records.

Presence of the target in AI answer engines (Google AI Overview / AI Mode,
ChatGPT, Perplexity, Gemini) and the prompts that surface it.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import Record


AI_ENGINES = ["ai-overview", "ai-mode", "chatgpt", "perplexity", "gemini"]


class PromptClassification(str, Enum):
    """How the target appears in an AI answer."""
    BRAND = "brand"            # Brand mentioned
    LINK = "link"              # Site cited as a source
    BRAND_LINK = "brand_link"  # Both

    @property
    def has_brand(self) -> bool:
        return self in (PromptClassification.BRAND, PromptClassification.BRAND_LINK)

    @property
    def has_link(self) -> bool:
        return self in (PromptClassification.LINK, PromptClassification.BRAND_LINK)


class EnginePresence(Record):
    engine: str = ""
    brand_presence: int = 0
    link_presence: int = 0
    traffic: int = 0


class AISearchOverview(Record):
    target: str = ""
    engines: List[EnginePresence] = Field(default_factory=list)


class LeaderboardEntry(Record):
    rank: int = 0
    domain: str = ""
    brand: str = ""
    share_of_voice: int = 0
    brand_mentions: int = 0
    link_citations: int = 0
    is_primary_target: bool = False


class AILeaderboard(Record):
    entries: List[LeaderboardEntry] = Field(default_factory=list)
    # Per-engine presence of the primary target
    engine_data: List[EnginePresence] = Field(default_factory=list)


class AIPrompt(Record):
    prompt: str = ""
    engine: str = ""
    classification: PromptClassification = PromptClassification.BRAND_LINK
    rank: int = 0
    volume: Optional[int] = None
    snippet: Optional[str] = None
    answer: Optional[str] = None
    sources: Optional[List[str]] = None
