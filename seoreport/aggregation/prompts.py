"""
AI prompt deduplication.

Prompt listings arrive per engine from two query angles: brand-scoped first,
then target-scoped. The same prompt text (case-insensitive) seen from both
angles collapses to one entry whose classification is upgraded to
``brand_link`` when one side mentions the brand and the other cites the site.
"""

from typing import Dict, Iterable, List

from seoreport.models import AIPrompt, PromptClassification

DEFAULT_PROMPTS_PER_ENGINE = 8


def merge_classification(existing: PromptClassification, incoming: PromptClassification) -> PromptClassification:
    if (existing.has_brand and incoming.has_link) or (existing.has_link and incoming.has_brand):
        return PromptClassification.BRAND_LINK
    return existing


def deduplicate_prompts(
    prompt_lists: Iterable[List[AIPrompt]],
    per_engine: int = DEFAULT_PROMPTS_PER_ENGINE,
) -> List[AIPrompt]:
    """
    Fold prompt lists into one balanced list.

    Args:
        prompt_lists: Lists in fetch order (brand list before target list
            for each engine)
        per_engine: Cap applied per engine after sorting by volume

    Returns:
        Prompts grouped by engine in first-seen engine order, each group
        sorted by volume descending and capped
    """
    by_engine: Dict[str, List[AIPrompt]] = {}

    for prompts in prompt_lists:
        for prompt in prompts:
            engine_list = by_engine.setdefault(prompt.engine, [])
            key = prompt.prompt.lower()
            index = next((i for i, p in enumerate(engine_list) if p.prompt.lower() == key), None)

            if index is None:
                engine_list.append(prompt)
                continue

            existing = engine_list[index]
            merged = merge_classification(existing.classification, prompt.classification)
            if merged != existing.classification:
                engine_list[index] = existing.model_copy(update={"classification": merged})

    balanced = []
    for engine_list in by_engine.values():
        engine_list.sort(key=lambda p: p.volume or 0, reverse=True)
        balanced.extend(engine_list[:per_engine])
    return balanced
