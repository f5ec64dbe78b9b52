"""
Multi-Competitor Aggregators

Pure folds of per-competitor result sets into cross-competitor aggregates:
- Keyword gaps: keywords competitors rank for and we do not
- Keyword overlaps: shared keywords where competitors outrank us
- Backlink gaps: referring domains linking to competitors and not to us

Each fold takes ``(competitor_domain, results)`` pairs in competitor order
and is deterministic for a given input. Ties beyond the documented sort keys
keep first-seen order.
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from seoreport.models import (
    AggregatedBacklinkGap,
    AggregatedKeywordGap,
    AggregatedKeywordOverlap,
    CompetitorBacklinks,
    CompetitorPosition,
    KeywordGap,
    KeywordOverlap,
    MultiCompetitorAnalysis,
    MultiCompetitorSummary,
    RefDomain,
)
from seoreport.utils import round_half_up

DEFAULT_LIMIT = 50
# Click-through rate assumed for a top-10 ranking
TOP10_CTR = 0.1


def _mean_position(positions: List[int]) -> int:
    return round_half_up(sum(positions) / len(positions))


def aggregate_keyword_gaps(
    results: Sequence[Tuple[str, List[KeywordGap]]],
    limit: int = DEFAULT_LIMIT,
) -> List[AggregatedKeywordGap]:
    """
    Merge keyword gaps across competitors.

    Duplicates keep the highest volume and difficulty seen. Sorted by number
    of competitors, then volume, both descending.
    """
    merged: Dict[str, dict] = {}

    for competitor, gaps in results:
        for gap in gaps:
            entry = merged.get(gap.keyword)
            if entry is None:
                merged[gap.keyword] = {
                    "volume": gap.volume,
                    "difficulty": gap.difficulty,
                    "competitors": [CompetitorPosition(domain=competitor, position=gap.competitor_position)],
                }
                continue
            entry["competitors"].append(CompetitorPosition(domain=competitor, position=gap.competitor_position))
            entry["volume"] = max(entry["volume"], gap.volume)
            entry["difficulty"] = max(entry["difficulty"], gap.difficulty)

    aggregated = [
        AggregatedKeywordGap(
            keyword=keyword,
            volume=entry["volume"],
            difficulty=entry["difficulty"],
            competitor_count=len(entry["competitors"]),
            competitors=entry["competitors"],
            avg_position=_mean_position([c.position for c in entry["competitors"]]),
            best_position=min(c.position for c in entry["competitors"]),
        )
        for keyword, entry in merged.items()
    ]
    aggregated.sort(key=lambda g: (-g.competitor_count, -g.volume))
    return aggregated[:limit]


def aggregate_keyword_overlaps(
    results: Sequence[Tuple[str, List[KeywordOverlap]]],
    limit: int = DEFAULT_LIMIT,
) -> List[AggregatedKeywordOverlap]:
    """
    Merge shared keywords where a competitor strictly outranks us.

    Rows where the competitor position is not lower than ours are dropped.
    Sorted by number of competitors, then volume, both descending.
    """
    merged: Dict[str, dict] = {}

    for competitor, overlaps in results:
        for overlap in overlaps:
            if not overlap.competitor_position < overlap.our_position:
                continue
            position = CompetitorPosition(domain=competitor, position=overlap.competitor_position)
            entry = merged.get(overlap.keyword)
            if entry is None:
                merged[overlap.keyword] = {
                    "volume": overlap.volume,
                    "our_position": overlap.our_position,
                    "competitors": [position],
                }
                continue
            entry["competitors"].append(position)
            entry["volume"] = max(entry["volume"], overlap.volume)

    aggregated = []
    for keyword, entry in merged.items():
        avg_competitor_position = _mean_position([c.position for c in entry["competitors"]])
        aggregated.append(AggregatedKeywordOverlap(
            keyword=keyword,
            volume=entry["volume"],
            our_position=entry["our_position"],
            competitor_count=len(entry["competitors"]),
            competitors=entry["competitors"],
            avg_competitor_position=avg_competitor_position,
            position_gap=entry["our_position"] - avg_competitor_position,
        ))
    aggregated.sort(key=lambda o: (-o.competitor_count, -o.volume))
    return aggregated[:limit]


def aggregate_backlink_gaps(
    our_refdomains: Iterable[str],
    results: Sequence[Tuple[str, List[RefDomain]]],
    limit: int = DEFAULT_LIMIT,
) -> List[AggregatedBacklinkGap]:
    """
    Merge competitor referring domains that do not already link to us.

    Duplicates keep the highest authority and sum backlinks. Sorted by
    number of competitors, then authority, both descending.
    """
    ours = set(our_refdomains)
    merged: Dict[str, dict] = {}

    for competitor, refdomains in results:
        for ref in refdomains:
            if ref.domain in ours:
                continue
            link = CompetitorBacklinks(domain=competitor, backlinks=ref.backlinks)
            entry = merged.get(ref.domain)
            if entry is None:
                merged[ref.domain] = {
                    "authority": ref.domain_inlink_rank,
                    "total_backlinks": ref.backlinks,
                    "competitors": [link],
                }
                continue
            entry["competitors"].append(link)
            entry["total_backlinks"] += ref.backlinks
            entry["authority"] = max(entry["authority"], ref.domain_inlink_rank)

    aggregated = [
        AggregatedBacklinkGap(
            domain=domain,
            domain_authority_score=entry["authority"],
            competitor_count=len(entry["competitors"]),
            total_backlinks_to_competitors=entry["total_backlinks"],
            competitors=entry["competitors"],
        )
        for domain, entry in merged.items()
    ]
    aggregated.sort(key=lambda g: (-g.competitor_count, -g.domain_authority_score))
    return aggregated[:limit]


def summarize_analysis(
    competitors: List[str],
    keyword_gaps: List[AggregatedKeywordGap],
    keyword_overlaps: List[AggregatedKeywordOverlap],
    backlink_gaps: List[AggregatedBacklinkGap],
) -> MultiCompetitorAnalysis:
    """
    Bundle the aggregates with counts of entries shared by two or more
    competitors and the traffic those shared gaps could bring.
    """
    shared_gaps = [g for g in keyword_gaps if g.competitor_count >= 2]
    return MultiCompetitorAnalysis(
        competitors_analyzed=list(competitors),
        keyword_gaps=keyword_gaps,
        keyword_overlaps=keyword_overlaps,
        backlink_gaps=backlink_gaps,
        summary=MultiCompetitorSummary(
            total_keyword_gaps=len(keyword_gaps),
            keyword_gaps_multiple_competitors=len(shared_gaps),
            total_backlink_gaps=len(backlink_gaps),
            backlink_gaps_multiple_competitors=sum(1 for g in backlink_gaps if g.competitor_count >= 2),
            potential_traffic_opportunity=sum(round_half_up(g.volume * TOP10_CTR) for g in shared_gaps),
        ),
    )
